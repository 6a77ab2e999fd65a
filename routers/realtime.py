# routers/realtime.py

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool
from supabase import Client

from core.errors import NotAuthenticated
from core.logging_config import get_logger
from core.realtime import Subscription, change_feed
from core.session import SessionContext
from core.supabase_client import get_supabase_client

logger = get_logger("realtime")

router = APIRouter(
    prefix="/realtime",
    tags=["Realtime"],
)

POLL_SECONDS = 1.0
HEARTBEAT_SECONDS = 25.0


async def _pump(websocket: WebSocket, subscription: Subscription):
    idle = 0.0
    while subscription.active:
        event = await run_in_threadpool(subscription.get, POLL_SECONDS)
        if event is None:
            idle += POLL_SECONDS
            if idle >= HEARTBEAT_SECONDS:
                await websocket.send_json({"type": "ping"})
                idle = 0.0
            continue

        idle = 0.0
        await websocket.send_json({"type": "change", **event.model_dump()})


async def _listen(websocket: WebSocket):
    # Client messages are ignored; this only notices the disconnect
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


# -----------------------------------------------------
# WS /realtime/notifications?token=<access token>
# Pushes the caller's own notification inserts/updates
# -----------------------------------------------------
@router.websocket("/notifications")
async def notifications_socket(
    websocket: WebSocket,
    token: Optional[str] = None,
    client: Optional[Client] = Depends(get_supabase_client),
):
    if client is None or not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    session = SessionContext()
    try:
        user = await run_in_threadpool(session.resolve, client, token)
    except NotAuthenticated:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    subscription = change_feed.subscribe("notifications", {"user_id": user.id})
    logger.info(f"Realtime notifications opened for {user.id}")

    try:
        await websocket.send_json({"type": "subscribed", "table": "notifications"})

        pump = asyncio.create_task(_pump(websocket, subscription))
        listen = asyncio.create_task(_listen(websocket))
        done, pending = await asyncio.wait({pump, listen}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            if not task.cancelled() and task.exception() and not isinstance(task.exception(), WebSocketDisconnect):
                logger.warning(f"Realtime socket for {user.id} failed: {task.exception()}")
    finally:
        subscription.unsubscribe()
        logger.info(f"Realtime notifications closed for {user.id} ({subscription.dropped} dropped)")
