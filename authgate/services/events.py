"""
Event bus untuk AuthGate API.
Session manager mempublikasikan event immutable ke antrian terbatas;
consumer task menjalankan handler tanpa memblokir request.
"""

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Type, Union
from uuid import UUID

from authgate.core.config import settings
from authgate.core.constants import EventName

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AccountRegistered:
    account_id: UUID
    email: Optional[str]
    occurred_at: datetime = field(default_factory=_utcnow)
    name = EventName.ACCOUNT_REGISTERED


@dataclass(frozen=True)
class LoginSucceeded:
    account_id: UUID
    ip: Optional[str]
    user_agent: Optional[str]
    occurred_at: datetime = field(default_factory=_utcnow)
    name = EventName.LOGIN_SUCCESS


@dataclass(frozen=True)
class LoginFailed:
    email: str
    ip: Optional[str]
    user_agent: Optional[str]
    occurred_at: datetime = field(default_factory=_utcnow)
    name = EventName.LOGIN_FAILED


Event = Union[AccountRegistered, LoginSucceeded, LoginFailed]
EventHandler = Callable[[Event], Awaitable[None]]


class EventBus:
    """
    Bounded in-process event bus.

    publish() tidak pernah memblokir: jika antrian penuh, event dibuang dengan warning.
    Error dari handler di-log dan tidak pernah kembali ke publisher.
    """

    def __init__(self, maxsize: Optional[int] = None):
        """
        Args:
            maxsize: Kapasitas antrian (default EVENT_QUEUE_MAX_SIZE)
        """
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize or settings.EVENT_QUEUE_MAX_SIZE)
        self._handlers: Dict[Type, List[EventHandler]] = defaultdict(list)
        self._consumer: Optional[asyncio.Task] = None

    def subscribe(self, event_type: Type, handler: EventHandler) -> None:
        """Daftarkan handler untuk tipe event tertentu."""
        self._handlers[event_type].append(handler)

    def publish(self, event: Event) -> bool:
        """
        Publish event tanpa menunggu handler.

        Returns:
            False jika event dibuang karena antrian penuh
        """
        try:
            self._queue.put_nowait(event)
            return True
        except asyncio.QueueFull:
            logger.warning(f"Event queue full, dropping {type(event).__name__}")
            return False

    async def dispatch(self, event: Event) -> None:
        """Jalankan semua handler untuk satu event; error handler ditelan dan di-log."""
        for handler in self._handlers.get(type(event), []):
            try:
                await handler(event)
            except Exception:
                logger.exception(f"Event handler failed for {type(event).__name__}")

    async def _consume(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.dispatch(event)
            finally:
                self._queue.task_done()

    def start(self) -> None:
        """Start consumer task di event loop yang sedang berjalan."""
        if self._consumer is None or self._consumer.done():
            self._consumer = asyncio.create_task(self._consume(), name="authgate-event-consumer")
            logger.info("Event bus consumer started")

    async def drain(self) -> None:
        """Tunggu sampai semua event di antrian selesai diproses."""
        await self._queue.join()

    async def stop(self, drain_timeout: float = 5.0) -> None:
        """
        Stop consumer task. Event yang tersisa diberi waktu drain_timeout untuk diproses.
        """
        if self._consumer is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=drain_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Event bus stopped with {self._queue.qsize()} pending events")
        self._consumer.cancel()
        try:
            await self._consumer
        except asyncio.CancelledError:
            pass
        self._consumer = None
        logger.info("Event bus consumer stopped")

    @property
    def pending(self) -> int:
        return self._queue.qsize()
