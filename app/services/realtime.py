# app/services/realtime.py
# 실시간 변경 피드 (Supabase realtime postgres_changes 대체)
# - SQLAlchemy mapper 이벤트로 INSERT/UPDATE/DELETE 를 잡아서
# - 트랜잭션 커밋 이후에만 구독자에게 전달한다.
# - 구독자는 (table, column, value) 필터를 걸고 asyncio.Queue 로 이벤트를 받는다.
# - 이벤트마다 seq 를 붙이고 최근 이벤트를 메모리에 보관해서
#   재접속 시 since=<seq> 이후 이벤트를 다시 받을 수 있다. (프로세스 재시작 시 유실)
import asyncio
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Deque, Dict, List, Optional, Set

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session, object_session

from app.models.notification import Notification
from app.models.message import Message

logger = logging.getLogger(__name__)

BACKLOG_SIZE = 500
_PENDING_KEY = "change_feed_pending"


@dataclass
class ChangeEvent:
    seq: int
    table: str
    event: str  # INSERT|UPDATE|DELETE
    record: Dict[str, Any]

    def as_dict(self) -> Dict[str, Any]:
        return {"seq": self.seq, "table": self.table, "event": self.event, "record": self.record}


@dataclass(eq=False)
class Subscription:
    table: str
    column: str
    value: str
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)

    def matches(self, ev: ChangeEvent) -> bool:
        return ev.table == self.table and str(ev.record.get(self.column)) == self.value


class ChangeFeed:
    def __init__(self, backlog_size: int = BACKLOG_SIZE):
        self._lock = threading.Lock()
        self._subs: Set[Subscription] = set()
        self._backlog: Deque[ChangeEvent] = deque(maxlen=backlog_size)
        self._seq = 0

    @property
    def last_seq(self) -> int:
        return self._seq

    def subscribe(self, table: str, column: str, value: str, since: Optional[int] = None) -> Subscription:
        """실행 중인 이벤트 루프 안에서 호출해야 한다"""
        sub = Subscription(table=table, column=column, value=str(value), loop=asyncio.get_running_loop())
        with self._lock:
            self._subs.add(sub)
            if since is not None:
                for ev in self._backlog:
                    if ev.seq > since and sub.matches(ev):
                        sub.queue.put_nowait(ev)
        logger.info("[REALTIME] subscribe %s %s=%s since=%s", table, column, value, since)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            self._subs.discard(sub)
        logger.info("[REALTIME] unsubscribe %s %s=%s", sub.table, sub.column, sub.value)

    def publish(self, table: str, op: str, record: Dict[str, Any]) -> ChangeEvent:
        with self._lock:
            self._seq += 1
            ev = ChangeEvent(seq=self._seq, table=table, event=op, record=record)
            self._backlog.append(ev)
            targets: List[Subscription] = [s for s in self._subs if s.matches(ev)]

        for sub in targets:
            try:
                sub.loop.call_soon_threadsafe(sub.queue.put_nowait, ev)
            except RuntimeError:
                # 루프가 이미 닫힌 구독자
                logger.warning("[REALTIME] drop closed subscriber %s %s=%s", sub.table, sub.column, sub.value)
                self.unsubscribe(sub)
        return ev


feed = ChangeFeed()


# ------------------------
# SQLAlchemy 세션 연동
# ------------------------

TRACKED_MODELS = (Notification, Message)


def _jsonable(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def _snapshot(target) -> Dict[str, Any]:
    mapper = inspect(target).mapper
    return {attr.key: _jsonable(getattr(target, attr.key)) for attr in mapper.column_attrs}


def _capture(op: str):
    def listener(mapper, connection, target):
        session = object_session(target)
        if session is None:
            return
        pending = session.info.setdefault(_PENDING_KEY, [])
        pending.append((mapper.local_table.name, op, _snapshot(target)))
    return listener


def _after_commit(session):
    pending = session.info.pop(_PENDING_KEY, None)
    if not pending:
        return
    for table, op, record in pending:
        feed.publish(table, op, record)


def _after_rollback(session):
    session.info.pop(_PENDING_KEY, None)


_installed = False


def install_change_feed() -> None:
    """mapper/세션 리스너 등록 (중복 호출 무시)"""
    global _installed
    if _installed:
        return
    for model in TRACKED_MODELS:
        event.listen(model, "after_insert", _capture("INSERT"))
        event.listen(model, "after_update", _capture("UPDATE"))
        event.listen(model, "after_delete", _capture("DELETE"))
    event.listen(Session, "after_commit", _after_commit)
    event.listen(Session, "after_rollback", _after_rollback)
    _installed = True
