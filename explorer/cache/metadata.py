"""
Token metadata cache with single-shot lookups per mint.

Concurrent callers asking for the same mint share one in-flight task.
Failed lookups are retried with exponential backoff until ``max_attempts``
failures, after which the mint is a permanent miss.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable

from explorer.config import settings
from explorer.fetchers import UpstreamError, fetch_asset_metadata
from explorer.models.criteria import UNKNOWN_TOKEN_NAME, TokenMetadata

logger = logging.getLogger(__name__)

MetadataFetcher = Callable[[str], Awaitable[TokenMetadata]]


class _FailureEntry:
    __slots__ = ("attempts", "retry_at")

    def __init__(self, attempts: int, retry_at: float):
        self.attempts = attempts
        self.retry_at = retry_at


class TokenMetadataCache:
    def __init__(
        self,
        fetch: MetadataFetcher | None = None,
        max_attempts: int | None = None,
        retry_backoff: float | None = None,
    ):
        self._fetch = fetch or fetch_asset_metadata
        self._max_attempts = max_attempts if max_attempts is not None else settings.metadata_max_attempts
        self._retry_backoff = retry_backoff if retry_backoff is not None else settings.metadata_retry_backoff
        self._store: dict[str, TokenMetadata] = {}
        self._in_flight: dict[str, asyncio.Task] = {}
        self._failures: dict[str, _FailureEntry] = {}
        self.request_count = 0
        self._generation = 0

    def get(self, mint: str) -> TokenMetadata | None:
        return self._store.get(mint)

    def items(self) -> list[tuple[str, TokenMetadata]]:
        return list(self._store.items())

    def display_name(self, mint: str) -> str:
        meta = self._store.get(mint)
        return meta.name if meta else UNKNOWN_TOKEN_NAME

    def is_pending(self, mint: str) -> bool:
        return mint in self._in_flight

    def is_given_up(self, mint: str) -> bool:
        failure = self._failures.get(mint)
        return failure is not None and failure.attempts >= self._max_attempts

    def _eligible(self, mint: str) -> bool:
        failure = self._failures.get(mint)
        if failure is None:
            return True
        if failure.attempts >= self._max_attempts:
            return False
        return time.monotonic() >= failure.retry_at

    async def resolve(self, mint: str) -> None:
        if mint in self._store:
            return

        task = self._in_flight.get(mint)
        if task is None:
            if not self._eligible(mint):
                return
            task = asyncio.ensure_future(self._lookup(mint))
            self._in_flight[mint] = task

        await task

    async def resolve_many(self, mints: Iterable[str]) -> None:
        pending = [mint for mint in dict.fromkeys(mints) if mint not in self._store]
        if pending:
            await asyncio.gather(*(self.resolve(mint) for mint in pending))

    async def _lookup(self, mint: str) -> None:
        generation = self._generation
        self.request_count += 1
        try:
            metadata = await self._fetch(mint)
        except Exception as exc:
            if not isinstance(exc, UpstreamError):
                logger.exception("Unexpected error resolving metadata for %s", mint[:12])
            if generation == self._generation:
                self._record_failure(mint, exc)
        else:
            if generation == self._generation:
                self._store[mint] = metadata
                self._failures.pop(mint, None)
                logger.debug("Resolved %s as %s", mint[:12], metadata.name)
        finally:
            if generation == self._generation:
                self._in_flight.pop(mint, None)

    def _record_failure(self, mint: str, exc: Exception) -> None:
        previous = self._failures.get(mint)
        attempts = previous.attempts + 1 if previous else 1
        delay = self._retry_backoff * (2 ** (attempts - 1))
        self._failures[mint] = _FailureEntry(attempts, time.monotonic() + delay)
        if attempts >= self._max_attempts:
            logger.warning("Giving up on metadata for %s after %d attempts: %s", mint[:12], attempts, exc)
        else:
            logger.warning("Metadata lookup failed for %s (attempt %d), retry in %.1fs: %s", mint[:12], attempts, delay, exc)

    def clear(self) -> None:
        # lookups still in flight finish but no longer write back
        self._generation += 1
        self._in_flight.clear()
        self._store.clear()
        self._failures.clear()
        self.request_count = 0

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, mint: object) -> bool:
        return mint in self._store
