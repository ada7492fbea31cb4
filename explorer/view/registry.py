from __future__ import annotations

from collections import OrderedDict

from explorer.search.nl_query import QueryAnalyzer
from explorer.tokens.aliases import AliasTable
from explorer.view.search_view import SearchView

MAX_VIEWS = 100


class ViewRegistry:
    """In-memory views keyed by account, least recently used evicted first."""

    def __init__(self, aliases: AliasTable, analyzer: QueryAnalyzer | None = None, max_views: int = MAX_VIEWS):
        self.aliases = aliases
        self.analyzer = analyzer
        self._views: OrderedDict[str, SearchView] = OrderedDict()
        self._max_views = max_views

    def get(self, account: str) -> SearchView | None:
        view = self._views.get(account)
        if view is not None:
            self._views.move_to_end(account)
        return view

    def get_or_create(self, account: str) -> tuple[SearchView, bool]:
        view = self.get(account)
        if view is not None:
            return view, False

        view = SearchView(account, self.aliases, analyzer=self.analyzer)
        self._views[account] = view
        while len(self._views) > self._max_views:
            self._views.popitem(last=False)
        return view, True

    def clear(self) -> None:
        self._views.clear()

    def __len__(self) -> int:
        return len(self._views)
