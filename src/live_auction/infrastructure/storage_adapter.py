"""
Storage Adapter

In-memory implementation of the auction store.

Behaves like the real-time tree store: multi-path updates land as one unit,
conditional updates are checked and applied under a single lock, and every
subscriber receives full snapshots in write order through its own queue.
"""

import asyncio
import copy
import inspect
import logging
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional

from ..application.interfaces import IAuctionStore, JsonDict, SnapshotCallback, Unsubscribe
from ..domain.exceptions import PreconditionFailedError
from ..utils.helpers import generate_push_id
from ..utils.tree_paths import apply_updates, check_preconditions, prune_empty

logger = logging.getLogger(__name__)


class _Subscription:
    """One subscriber: a queue drained in order by its own task"""

    def __init__(self, auction_id: str, callback: SnapshotCallback):
        self.auction_id = auction_id
        self.callback = callback
        self.queue: "asyncio.Queue[Optional[JsonDict]]" = asyncio.Queue()
        self.task = asyncio.create_task(self._drain())

    async def _drain(self) -> None:
        while True:
            snapshot = await self.queue.get()
            try:
                if snapshot is None:
                    continue
                outcome = self.callback(snapshot)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.error(f"Subscriber of auction {self.auction_id} failed: {e}", exc_info=True)
            finally:
                self.queue.task_done()


class MemoryAuctionStore(IAuctionStore):
    """
    In-memory auction store.

    Used by the test suite and by single-process deployments; snapshots are
    deep copies so callers can never mutate stored state.
    """

    def __init__(self):
        self._auctions: Dict[str, JsonDict] = {}
        self._lock = asyncio.Lock()
        self._subscriptions: Dict[str, List[_Subscription]] = defaultdict(list)

    def generate_id(self) -> str:
        return generate_push_id()

    async def create(self, data: JsonDict) -> str:
        auction_id = self.generate_id()
        async with self._lock:
            data["id"] = auction_id
            self._auctions[auction_id] = prune_empty(copy.deepcopy(data))
            self._publish(auction_id)
        return auction_id

    async def read(self, auction_id: str) -> Optional[JsonDict]:
        async with self._lock:
            data = self._auctions.get(auction_id)
            return copy.deepcopy(data) if data is not None else None

    async def update(
        self,
        auction_id: str,
        updates: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None
    ) -> None:
        async with self._lock:
            current = self._auctions.get(auction_id)
            if expected:
                mismatch = check_preconditions(current, expected)
                if mismatch is not None:
                    raise PreconditionFailedError(
                        f"Precondition failed for auctions/{auction_id}/{mismatch}",
                        path=mismatch
                    )
            self._auctions[auction_id] = apply_updates(current, updates)
            self._publish(auction_id)

    async def delete(self, auction_id: str) -> None:
        async with self._lock:
            self._auctions.pop(auction_id, None)

    async def query(self, field: str, value: Any) -> List[JsonDict]:
        async with self._lock:
            return [
                copy.deepcopy(data) for data in self._auctions.values()
                if data.get(field) == value
            ]

    async def subscribe(self, auction_id: str, callback: SnapshotCallback) -> Unsubscribe:
        subscription = _Subscription(auction_id, callback)
        async with self._lock:
            self._subscriptions[auction_id].append(subscription)
            current = self._auctions.get(auction_id)
            if current is not None:
                subscription.queue.put_nowait(copy.deepcopy(current))

        async def unsubscribe() -> None:
            subscribers = self._subscriptions.get(auction_id, [])
            if subscription in subscribers:
                subscribers.remove(subscription)
            await self._stop(subscription)

        return unsubscribe

    async def flush(self) -> None:
        """Wait until every subscriber has consumed its pending snapshots"""
        for subscribers in list(self._subscriptions.values()):
            for subscription in list(subscribers):
                await subscription.queue.join()

    async def close(self) -> None:
        for subscribers in self._subscriptions.values():
            for subscription in subscribers:
                await self._stop(subscription)
        self._subscriptions.clear()

    def get_auction_count(self) -> int:
        """Get number of stored auctions"""
        return len(self._auctions)

    def clear_all_auctions(self) -> None:
        """Clear all auctions (for testing/cleanup)"""
        self._auctions.clear()

    def _publish(self, auction_id: str) -> None:
        # Called with the lock held so snapshots are queued in write order
        data = self._auctions.get(auction_id)
        for subscription in self._subscriptions.get(auction_id, []):
            subscription.queue.put_nowait(copy.deepcopy(data))

    @staticmethod
    async def _stop(subscription: _Subscription) -> None:
        subscription.task.cancel()
        try:
            await subscription.task
        except asyncio.CancelledError:
            pass
