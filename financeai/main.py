import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from financeai.ai.advisor import FinancialAdvisor
from financeai.ai.openai_chat import ChatCompletionClient
from financeai.config import settings as default_settings
from financeai.database import SessionLocal, init_db
from financeai.errors import AppException
from financeai.gateway import PersistenceGateway
from financeai.routers.advice import advice_router
from financeai.routers.budgets import budget_router
from financeai.routers.checkin import checkin_router
from financeai.routers.debts import debt_router
from financeai.routers.goals import goal_router
from financeai.routers.profile import profile_router
from financeai.routers.simulate import simulate_router
from financeai.services.advice import build_retrieval
from financeai.services.changes import ChangeFeed
from financeai.utils import RateLimiter

logger = logging.getLogger(__name__)


def configure_logging(config=default_settings):
    handlers = [logging.StreamHandler()]
    if config.LOG_FILE:
        handlers.append(logging.FileHandler(config.LOG_FILE, delay=True))
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    init_db(bind=app.state.session_factory.kw.get("bind"))
    config = app.state.settings
    logger.info(f"Starting {config.APP_NAME} v{config.APP_VERSION}")
    if not config.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY not set, AI advice will be unavailable")

    yield

    # Shutdown
    logger.info("Shutting down application")


def create_app(config=default_settings, session_factory=None, chat_client=None) -> FastAPI:
    session_factory = session_factory or SessionLocal
    chat_client = chat_client or ChatCompletionClient.from_settings(config)

    app = FastAPI(
        title=config.APP_NAME,
        description=config.APP_DESCRIPTION,
        version=config.APP_VERSION,
        lifespan=lifespan
    )

    gateway = PersistenceGateway(session_factory)
    advisor = FinancialAdvisor(gateway, chat_client, history_turns=config.FUNCTION_HISTORY_TURNS)

    app.state.settings = config
    app.state.session_factory = session_factory
    app.state.gateway = gateway
    app.state.advisor = advisor
    app.state.retrieval = build_retrieval(config, advisor, chat_client)
    app.state.change_feed = ChangeFeed(gateway)
    app.state.rate_limiter = RateLimiter(max_requests=config.RATE_LIMIT_PER_HOUR)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handler
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )

    # Rate limiting middleware
    @app.middleware("http")
    async def rate_limit_middleware(request: Request, call_next):
        if config.RATE_LIMIT_ENABLED:
            client_ip = request.client.host if request.client else "unknown"
            if not app.state.rate_limiter.is_allowed(client_ip):
                return JSONResponse(
                    status_code=429,
                    content={"detail": "Rate limit exceeded. Please try again later."}
                )
        return await call_next(request)

    for router in (profile_router, budget_router, goal_router, debt_router,
                   advice_router, simulate_router, checkin_router):
        app.include_router(router)

    @app.get("/")
    async def root():
        return {
            "app": config.APP_NAME,
            "version": config.APP_VERSION,
            "status": "running",
            "features": {
                "ai_advisor": bool(config.OPENAI_API_KEY),
                "remote_advisor_function": bool(config.ADVISOR_FUNCTION_URL),
            }
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
            "change_feed_connections": app.state.change_feed.active_connections,
        }

    @app.websocket("/ws/changes/{user_id}")
    async def change_feed_endpoint(websocket: WebSocket, user_id: str, table: Optional[str] = None):
        """Live change notifications for one owner's rows"""
        await app.state.change_feed.stream(websocket, user_id, table=table)

    return app


configure_logging()
app = create_app()


def run():
    logger.info("Starting FastAPI server...")
    uvicorn.run(
        "financeai.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.RELOAD
    )


if __name__ == "__main__":
    run()
