"""
Firebase Adapter

Auction store backed by the Firebase Realtime Database REST API.

- Plain multi-path updates are a single PATCH, which the database applies
  atomically.
- Conditional updates read the subtree with its ETag, check the expected
  values locally and PUT the new subtree with ``if-match``. A 412 means
  someone else wrote in between; the check is repeated against the fresh
  value and only a real mismatch surfaces as PreconditionFailedError.
- Subscriptions consume the ``text/event-stream`` endpoint and rebuild the
  full auction from ``put``/``patch`` events before every delivery.
"""

import asyncio
import copy
import inspect
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

import aiohttp

from ..application.interfaces import IAuctionStore, JsonDict, SnapshotCallback, Unsubscribe
from ..domain.exceptions import ExternalStoreError, PreconditionFailedError
from ..utils.constants import AUCTIONS_PATH, MAX_RETRIES, REQUEST_TIMEOUT, RETRY_DELAY
from ..utils.helpers import generate_push_id
from ..utils.tree_paths import apply_updates, check_preconditions, prune_empty, set_path

logger = logging.getLogger(__name__)


class FirebaseAuctionStore(IAuctionStore):
    """Realtime Database client over aiohttp"""

    def __init__(
        self,
        database_url: str,
        auth_token: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY
    ) -> None:
        if not database_url:
            raise ValueError("Firebase database URL is required")
        self.database_url = database_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._session: Optional[aiohttp.ClientSession] = None
        self._streams: List[asyncio.Task] = []

    @property
    def session(self) -> Optional[aiohttp.ClientSession]:
        """Get current aiohttp session."""
        return self._session

    async def initialize(self) -> None:
        """Open the HTTP session"""
        if self._session:
            if not self._session.closed:
                return
            self._session = None

        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        logger.debug(f"Firebase session initialized for {self.database_url}")

    async def close(self) -> None:
        """Stop open streams and close the HTTP session"""
        for task in self._streams:
            task.cancel()
        for task in self._streams:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._streams.clear()

        if self._session:
            try:
                if not self._session.closed:
                    await self._session.close()
            except aiohttp.ClientError as e:
                logger.error(f"Error closing Firebase session: {e}")
            finally:
                self._session = None

    async def __aenter__(self) -> "FirebaseAuctionStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # ====================
    # IAuctionStore
    # ====================

    def generate_id(self) -> str:
        return generate_push_id()

    async def create(self, data: JsonDict) -> str:
        auction_id = self.generate_id()
        data["id"] = auction_id
        await self._request("PUT", self._auction_path(auction_id), payload=prune_empty(data))
        return auction_id

    async def read(self, auction_id: str) -> Optional[JsonDict]:
        _, _, body = await self._request("GET", self._auction_path(auction_id))
        return body

    async def update(
        self,
        auction_id: str,
        updates: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None
    ) -> None:
        path = self._auction_path(auction_id)
        if not expected:
            await self._request("PATCH", path, payload=dict(updates))
            return

        _, headers, current = await self._request(
            "GET", path, headers={"X-Firebase-ETag": "true"}
        )
        for _ in range(self.max_retries + 1):
            mismatch = check_preconditions(current, expected)
            if mismatch is not None:
                raise PreconditionFailedError(
                    f"Precondition failed for {path}/{mismatch}", path=mismatch
                )

            etag = headers.get("ETag")
            status, headers, body = await self._request(
                "PUT",
                path,
                payload=apply_updates(current, updates),
                headers={"if-match": etag} if etag else None,
                accept=(200, 412)
            )
            if status != 412:
                return
            logger.debug(f"ETag mismatch writing {path}; rechecking preconditions")
            current = body

        raise PreconditionFailedError(f"Gave up writing {path} under contention")

    async def delete(self, auction_id: str) -> None:
        await self._request("DELETE", self._auction_path(auction_id))

    async def query(self, field: str, value: Any) -> List[JsonDict]:
        params = {"orderBy": json.dumps(field), "equalTo": json.dumps(value)}
        _, _, body = await self._request("GET", AUCTIONS_PATH, params=params)
        if not body:
            return []
        return [row for row in body.values() if isinstance(row, dict)]

    async def subscribe(self, auction_id: str, callback: SnapshotCallback) -> Unsubscribe:
        await self.initialize()
        task = asyncio.create_task(self._stream(auction_id, callback))
        self._streams.append(task)

        async def unsubscribe() -> None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            if task in self._streams:
                self._streams.remove(task)

        return unsubscribe

    # ====================
    # HTTP
    # ====================

    def _auction_path(self, auction_id: str) -> str:
        return f"{AUCTIONS_PATH}/{auction_id}"

    def _url(self, path: str) -> str:
        return f"{self.database_url}/{path}.json"

    def _params(self, params: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        merged = dict(params or {})
        if self.auth_token:
            merged["auth"] = self.auth_token
        return merged

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        payload: Any = None,
        headers: Optional[Dict[str, str]] = None,
        accept: Tuple[int, ...] = (200,)
    ) -> Tuple[int, Mapping[str, str], Any]:
        """
        Send one request, retrying transport failures and 5xx responses.

        Returns:
            Tuple of status, response headers and decoded JSON body

        Raises:
            ExternalStoreError: If the request keeps failing or is rejected
        """
        await self.initialize()
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            if attempt:
                await asyncio.sleep(self.retry_delay * (2 ** (attempt - 1)))
            try:
                async with self._session.request(
                    method,
                    self._url(path),
                    params=self._params(params),
                    json=payload,
                    headers=headers
                ) as response:
                    if response.status >= 500:
                        last_error = ExternalStoreError(
                            f"{method} {path} failed with {response.status}"
                        )
                        logger.warning(f"{last_error} (attempt {attempt + 1})")
                        continue
                    if response.status not in accept:
                        text = await response.text()
                        raise ExternalStoreError(
                            f"{method} {path} rejected with {response.status}: {text}"
                        )
                    body = await response.json(content_type=None)
                    return response.status, response.headers, body

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = e
                logger.warning(f"{method} {path} failed (attempt {attempt + 1}): {e}")

        raise ExternalStoreError(f"{method} {path} failed after {self.max_retries + 1} attempts") from last_error

    # ====================
    # Streaming
    # ====================

    async def _stream(self, auction_id: str, callback: SnapshotCallback) -> None:
        """Follow an auction's event stream, reconnecting on transport failures"""
        path = self._auction_path(auction_id)
        failures = 0

        while True:
            try:
                async with self._session.get(
                    self._url(path),
                    params=self._params(),
                    headers={"Accept": "text/event-stream"},
                    timeout=aiohttp.ClientTimeout(total=None, sock_read=None)
                ) as response:
                    if response.status != 200:
                        raise ExternalStoreError(f"Stream for {path} returned {response.status}")
                    failures = 0
                    keep_going = await self._consume(response, auction_id, callback)
                    if not keep_going:
                        return

            except asyncio.CancelledError:
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError, ExternalStoreError) as e:
                failures += 1
                if failures > self.max_retries:
                    logger.error(f"Giving up on stream for {path}: {e}")
                    return
                delay = self.retry_delay * (2 ** (failures - 1))
                logger.warning(f"Stream for {path} dropped ({e}); reconnecting in {delay:.1f}s")
                await asyncio.sleep(delay)

    async def _consume(
        self,
        response: aiohttp.ClientResponse,
        auction_id: str,
        callback: SnapshotCallback
    ) -> bool:
        """Apply server-sent events until the stream ends; False when cancelled by the server"""
        tree: Optional[JsonDict] = None
        event: Optional[str] = None

        async for raw in response.content:
            line = raw.decode("utf-8").rstrip("\r\n")
            if line.startswith("event:"):
                event = line[len("event:"):].strip()
                continue
            if not line.startswith("data:") or event is None:
                continue

            data = line[len("data:"):].strip()
            if event in ("cancel", "auth_revoked"):
                logger.warning(f"Stream for auction {auction_id} closed by server: {event}")
                return False
            if event not in ("put", "patch"):
                continue

            message = json.loads(data)
            tree = apply_event(tree, event, message.get("path", "/"), message.get("data"))
            if tree:
                outcome = callback(tree)
                if inspect.isawaitable(outcome):
                    await outcome
        return True


def apply_event(tree: Optional[JsonDict], event: str, path: str, data: Any) -> JsonDict:
    """Fold one ``put`` or ``patch`` stream event into the local copy of a subtree"""
    result: JsonDict = copy.deepcopy(tree) if tree else {}
    relative = path.strip("/")

    if event == "put":
        if not relative:
            return prune_empty(data) if isinstance(data, dict) else {}
        set_path(result, relative, data)
    else:
        for key, value in (data or {}).items():
            set_path(result, f"{relative}/{key}" if relative else key, value)
    return prune_empty(result)
