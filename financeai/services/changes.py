"""
Real-time change feed: forwards gateway change events to WebSocket clients
"""

import asyncio
import logging
from typing import Optional

from fastapi import WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder

from financeai.errors import GatewayError
from financeai.gateway import ChangeEvent, PersistenceGateway

logger = logging.getLogger(__name__)


class ChangeFeed:
    """Streams one owner's change events over a WebSocket"""

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway
        self.active_connections = 0

    async def stream(self, websocket: WebSocket, user_id: str, table: Optional[str] = None) -> None:
        await websocket.accept()
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()

        # Writes may happen on worker threads; hop onto the event loop
        def enqueue(event: ChangeEvent) -> None:
            loop.call_soon_threadsafe(queue.put_nowait, event)

        try:
            subscription = self.gateway.subscribe(enqueue, table=table, user_id=user_id)
        except GatewayError as e:
            await websocket.send_json({"type": "error", "message": e.detail})
            await websocket.close(code=1008)
            return
        self.active_connections += 1
        await websocket.send_json({"type": "connection", "data": {"status": "connected", "user_id": user_id}})

        async def send_events():
            while True:
                event = await queue.get()
                await websocket.send_json({"type": "change", "data": jsonable_encoder(event.to_dict())})

        async def wait_for_disconnect():
            while True:
                await websocket.receive_text()

        sender = asyncio.create_task(send_events())
        receiver = asyncio.create_task(wait_for_disconnect())
        try:
            done, pending = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
            for task in pending:
                task.cancel()
            for task in done:
                error = task.exception()
                if error and not isinstance(error, WebSocketDisconnect):
                    logger.error(f"Change feed error for {user_id}: {error}")
        finally:
            subscription.unsubscribe()
            self.active_connections -= 1
            logger.info(f"Change feed for {user_id} closed")
