from fastapi import Query, Request

from financeai.ai.advisor import FinancialAdvisor
from financeai.gateway import PersistenceGateway
from financeai.services.advice import AdviceRetrieval


def get_gateway(request: Request) -> PersistenceGateway:
    return request.app.state.gateway


def get_advisor(request: Request) -> FinancialAdvisor:
    return request.app.state.advisor


def get_retrieval(request: Request) -> AdviceRetrieval:
    return request.app.state.retrieval


def get_settings(request: Request):
    return request.app.state.settings


def get_user_id(user_id: str = Query(default="default", min_length=1)) -> str:
    return user_id
