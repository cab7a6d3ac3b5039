"""
Auction Mirror

Local, read-only copy of an auction kept current from pushed snapshots.

Snapshots go through a single queue and are applied strictly in arrival
order. Each one replaces the previous state wholesale; there is no merging.
A snapshot equal to the one already held is dropped, so replays and
duplicates never reach the listener twice.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

from .dto import AuctionDTO, PlayerDTO, TeamDTO
from .interfaces import Unsubscribe

logger = logging.getLogger(__name__)


class AuctionMirror:
    """Single-consumer snapshot channel for one auction"""

    def __init__(self, listener: Optional[Callable[[AuctionDTO], Any]] = None):
        self._listener = listener
        self._queue: "asyncio.Queue[AuctionDTO]" = asyncio.Queue()
        self._current: Optional[AuctionDTO] = None
        self._task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self.applied_count = 0

    @property
    def current(self) -> Optional[AuctionDTO]:
        return self._current

    @property
    def current_player(self) -> Optional[PlayerDTO]:
        if self._current is None or self._current.current_player_id is None:
            return None
        return self._current.get_player(self._current.current_player_id)

    @property
    def current_team(self) -> Optional[TeamDTO]:
        if self._current is None or self._current.current_team_id is None:
            return None
        return self._current.get_team(self._current.current_team_id)

    async def attach(self, service, auction_id: str) -> None:
        """Subscribe to an auction through the session service and start consuming"""
        self.start()
        self._unsubscribe = await service.on_auction_change(auction_id, self.push)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())

    def push(self, snapshot: AuctionDTO) -> None:
        """Enqueue a snapshot; safe to call from any subscription callback"""
        self._queue.put_nowait(snapshot)

    async def drain(self) -> None:
        """Wait until every queued snapshot has been applied"""
        await self._queue.join()

    async def stop(self) -> None:
        if self._unsubscribe is not None:
            await self._unsubscribe()
            self._unsubscribe = None
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def apply(self, snapshot: AuctionDTO) -> bool:
        """Replace local state with ``snapshot``; False when it was a duplicate"""
        if snapshot == self._current:
            return False

        self._current = snapshot
        self.applied_count += 1
        if self._listener is not None:
            outcome = self._listener(snapshot)
            if inspect.isawaitable(outcome):
                await outcome
        return True

    async def _run(self) -> None:
        while True:
            snapshot = await self._queue.get()
            try:
                await self.apply(snapshot)
            except Exception as e:
                logger.error(f"Snapshot listener failed for auction {snapshot.id}: {e}", exc_info=True)
            finally:
                self._queue.task_done()
