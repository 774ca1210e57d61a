# app/routers/realtime.py
# 실시간 무효화 신호 (WebSocket)
# 클라이언트는 {"type": "invalidate", "query": [...]} 를 받으면 해당 쿼리를 다시 가져온다.
import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from app.db.base import SessionLocal
from app.models.message import Conversation
from app.services.realtime import feed, Subscription
from app.services.supa_auth import decode_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/realtime", tags=["realtime"])

# 토큰 불량 / 권한 없음
CLOSE_UNAUTHORIZED = 4401
CLOSE_FORBIDDEN = 4403


async def _authenticate(ws: WebSocket, token: Optional[str]) -> Optional[str]:
    try:
        return decode_access_token(token or "")["user_id"]
    except ValueError:
        await ws.close(code=CLOSE_UNAUTHORIZED)
        return None


async def _pump(ws: WebSocket, sub: Subscription, queries: List[list]) -> None:
    while True:
        ev = await sub.queue.get()
        for query in queries:
            await ws.send_json({"type": "invalidate", "query": query, "event": ev.as_dict()})


async def _drain(ws: WebSocket) -> None:
    # 클라 메시지(ping 등)는 무시, 연결 종료 감지용
    while True:
        await ws.receive_text()


async def _serve(ws: WebSocket, sub: Subscription, queries: List[list]) -> None:
    sender = asyncio.create_task(_pump(ws, sub, queries))
    receiver = asyncio.create_task(_drain(ws))
    tasks = {sender, receiver}
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning("[REALTIME] socket closed %s=%s: %r", sub.column, sub.value, exc)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        feed.unsubscribe(sub)


def _is_participant(conversation_id: str, user_id: str) -> bool:
    with SessionLocal() as db:
        conv = db.get(Conversation, conversation_id)
        return conv is not None and conv.has_participant(user_id)


@router.websocket("/notifications")
async def notifications_ws(ws: WebSocket, token: Optional[str] = None, since: Optional[int] = None):
    await ws.accept()
    user_id = await _authenticate(ws, token)
    if user_id is None:
        return

    sub = feed.subscribe("notifications", "user_id", user_id, since=since)
    await ws.send_json({"type": "subscribed", "last_seq": feed.last_seq})
    await _serve(ws, sub, [["notifications", user_id]])


@router.websocket("/conversations/{conversation_id}")
async def conversation_ws(ws: WebSocket, conversation_id: str,
                          token: Optional[str] = None, since: Optional[int] = None):
    await ws.accept()
    user_id = await _authenticate(ws, token)
    if user_id is None:
        return

    if not await run_in_threadpool(_is_participant, conversation_id, user_id):
        logger.info("[REALTIME] conversation %s denied for %s", conversation_id, user_id)
        await ws.close(code=CLOSE_FORBIDDEN)
        return

    sub = feed.subscribe("messages", "conversation_id", conversation_id, since=since)
    await ws.send_json({"type": "subscribed", "last_seq": feed.last_seq})
    await _serve(ws, sub, [["messages", conversation_id], ["conversations", user_id]])
