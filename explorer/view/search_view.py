"""
Search view over an account's accumulated transaction log.

Combines the pagination controller, the keyword parser, the matcher and the
metadata cache. The query is reparsed on every read so newly resolved token
names take effect without re-entering the query.
"""

from __future__ import annotations

import logging

from explorer.cache.metadata import TokenMetadataCache
from explorer.models.criteria import FilterCriteria
from explorer.models.transaction import Transaction
from explorer.pagination import PaginationController
from explorer.search import filter_transactions, parse_query
from explorer.search.nl_query import QueryAnalyzer, merge_criteria
from explorer.tokens.aliases import AliasTable

logger = logging.getLogger(__name__)


class SearchView:
    def __init__(
        self,
        account: str,
        aliases: AliasTable,
        controller: PaginationController | None = None,
        metadata: TokenMetadataCache | None = None,
        analyzer: QueryAnalyzer | None = None,
    ):
        self.account = account
        self.aliases = aliases
        self.controller = controller or PaginationController(account)
        self.metadata = metadata or TokenMetadataCache()
        self.analyzer = analyzer
        self.query = ""
        self._analyzed: FilterCriteria | None = None

    def set_query(self, query: str) -> None:
        self.query = query or ""
        self._analyzed = None

    def criteria(self) -> FilterCriteria:
        keyword = parse_query(self.query, self.aliases, self.metadata)
        return merge_criteria(keyword, self._analyzed)

    def visible(self) -> list[Transaction]:
        transactions = self.controller.transactions
        if not self.query.strip():
            return list(transactions)
        return filter_transactions(transactions, self.criteria(), self.account)

    def distinct_mints(self) -> list[str]:
        seen: dict[str, None] = {}
        for tx in self.controller.transactions:
            for transfer in tx.token_transfers:
                seen.setdefault(transfer.mint, None)
        return list(seen)

    async def hydrate_metadata(self) -> None:
        mints = [mint for mint in self.distinct_mints() if mint not in self.metadata]
        if mints:
            logger.info("Resolving metadata for %d mints", len(mints))
            await self.metadata.resolve_many(mints)

    async def load_more(self) -> bool:
        fetched = await self.controller.load_next_page()
        if fetched:
            await self.hydrate_metadata()
        return fetched

    async def search(self, query: str) -> list[Transaction]:
        self.set_query(query)
        if self.analyzer is not None and self.analyzer.enabled and self.query.strip():
            self._analyzed = await self.analyzer.criteria(self.query, self.aliases, self.metadata)
            if self._analyzed is None:
                logger.info("Query analysis unavailable, using keyword parse only")
        return self.visible()
