"""
Cursor-based pagination over an account's transaction history.

Pages are requested strictly one at a time. The idle -> fetching transition
happens before the first await, so repeated triggers while a page is
outstanding are no-ops on the single-threaded event loop.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable, Iterable

from explorer.fetchers import UpstreamError, fetch_transaction_page
from explorer.models.transaction import Transaction

logger = logging.getLogger(__name__)

NOISE_TYPES = frozenset({"SWAP", "TOKEN_MINT", "UNKNOWN"})

PageFetcher = Callable[[str, "str | None"], Awaitable[list[Transaction]]]


class PaginationState(str, enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class PaginationController:
    def __init__(
        self,
        account: str,
        fetch_page: PageFetcher | None = None,
        noise_types: Iterable[str] = NOISE_TYPES,
    ):
        self.account = account
        self._fetch_page = fetch_page or fetch_transaction_page
        self.noise_types = frozenset(noise_types)
        self._log: list[Transaction] = []
        self._seen: set[str] = set()
        self.cursor: str | None = None
        self.state = PaginationState.IDLE
        self.last_error: str | None = None

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._log)

    @property
    def exhausted(self) -> bool:
        return self.state in (PaginationState.EXHAUSTED, PaginationState.FAILED)

    @property
    def has_more(self) -> bool:
        return not self.exhausted

    def is_relevant(self, transaction: Transaction) -> bool:
        if transaction.type in self.noise_types:
            return transaction.touches(self.account)
        return True

    def request_more(self) -> asyncio.Task | None:
        """Visibility signal: schedule the next page only when idle."""
        if self.state is not PaginationState.IDLE:
            return None
        return asyncio.ensure_future(self.load_next_page())

    async def load_next_page(self) -> bool:
        """Fetch and append the next page. Returns False when no fetch was made."""
        if self.state is not PaginationState.IDLE:
            logger.debug("Skipping load for %s: state=%s", self.account[:12], self.state.value)
            return False
        self.state = PaginationState.FETCHING

        try:
            page = await self._fetch_page(self.account, self.cursor)
        except asyncio.CancelledError:
            self.state = PaginationState.IDLE
            raise
        except UpstreamError as exc:
            self._stop(exc)
            return True
        except Exception as exc:
            logger.exception("Unexpected error fetching history for %s", self.account[:12])
            self._stop(exc)
            return True

        self._append_page(page)
        return True

    def _stop(self, exc: Exception) -> None:
        logger.warning("Stopped loading %s: %s", self.account[:12], exc)
        self.last_error = str(exc) or type(exc).__name__
        self.state = PaginationState.FAILED

    def _append_page(self, page: list[Transaction]) -> None:
        if not page:
            logger.info("History exhausted for %s after %d transactions", self.account[:12], len(self._log))
            self.state = PaginationState.EXHAUSTED
            return

        kept = 0
        for tx in page:
            if tx.signature in self._seen:
                logger.debug("Skipping repeated signature %s", tx.signature[:12])
                continue
            if not self.is_relevant(tx):
                continue
            self._seen.add(tx.signature)
            self._log.append(tx)
            kept += 1

        self.cursor = page[-1].signature
        self.state = PaginationState.IDLE
        logger.info(
            "Loaded page for %s: %d raw, %d kept, cursor=%s",
            self.account[:12],
            len(page),
            kept,
            self.cursor[:12],
        )

    def retry(self) -> bool:
        """Allow loading again after a failed fetch."""
        if self.state is not PaginationState.FAILED:
            return False
        self.state = PaginationState.IDLE
        self.last_error = None
        return True
