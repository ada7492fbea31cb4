"""Tests for the search view composition and display summaries."""

import httpx
import respx

from explorer.cache.metadata import TokenMetadataCache
from explorer.config import settings
from explorer.models.criteria import FilterCriteria
from explorer.pagination.controller import PaginationController
from explorer.search.nl_query import QueryAnalyzer
from explorer.view.display import (
    build_transaction_summary,
    source_label,
    truncate_address,
    type_label,
    visible_transfers,
)
from explorer.view.search_view import SearchView
from tests.conftest import (
    BONK_MINT,
    FRIEND,
    PEPE_MINT,
    STRANGER,
    USDC_MINT,
    WALLET,
    FakeMetadataFetcher,
    FakePageFetcher,
    make_transfer,
    make_tx,
)


def _view(aliases, pages, names=None, analyzer=None):
    metadata_fetcher = FakeMetadataFetcher(names or {})
    view = SearchView(
        WALLET,
        aliases,
        controller=PaginationController(WALLET, fetch_page=FakePageFetcher(pages)),
        metadata=TokenMetadataCache(fetch=metadata_fetcher),
        analyzer=analyzer,
    )
    return view, metadata_fetcher


def _page():
    return [
        make_tx("S1", transfers=[make_transfer(USDC_MINT, 10.0, WALLET, FRIEND)]),
        make_tx("S2", transfers=[make_transfer(USDC_MINT, 3.0, FRIEND, WALLET)]),
        make_tx("S3", transfers=[make_transfer(PEPE_MINT, 1.0, WALLET, STRANGER)]),
        make_tx("S4", transfers=[make_transfer(USDC_MINT, 7.0, WALLET, STRANGER)]),
        make_tx("S5", transfers=[make_transfer(USDC_MINT, 1.0, STRANGER, WALLET)]),
    ]


class TestSearchView:
    async def test_blank_query_shows_everything(self, aliases):
        view, _ = _view(aliases, [_page()])
        await view.load_more()
        assert [tx.signature for tx in view.visible()] == ["S1", "S2", "S3", "S4", "S5"]

    async def test_keyword_filter(self, aliases):
        view, _ = _view(aliases, [_page()])
        await view.load_more()
        view.set_query("sent usdc")
        assert [tx.signature for tx in view.visible()] == ["S1", "S4"]

    async def test_metadata_resolved_once_per_mint(self, aliases):
        view, fetcher = _view(aliases, [_page(), [make_tx("S6", transfers=[make_transfer(USDC_MINT, 2.0, WALLET, FRIEND)])]])
        await view.load_more()
        await view.load_more()
        assert sorted(fetcher.calls) == sorted([USDC_MINT, PEPE_MINT])
        assert view.distinct_mints() == [USDC_MINT, PEPE_MINT]

    async def test_resolved_name_becomes_searchable(self, aliases):
        view, _ = _view(aliases, [_page()], names={PEPE_MINT: "Pepe"})
        view.set_query("pepe")
        assert view.criteria() == FilterCriteria()

        await view.load_more()
        assert view.criteria().token == PEPE_MINT
        assert [tx.signature for tx in view.visible()] == ["S3"]

    async def test_exhausted_view_does_not_refetch_metadata(self, aliases):
        view, fetcher = _view(aliases, [_page()])
        await view.load_more()
        await view.load_more()
        assert not await view.load_more()
        assert len(fetcher.calls) == 2

    async def test_search_without_analyzer(self, aliases):
        view, _ = _view(aliases, [_page()])
        await view.load_more()
        result = await view.search("received usdc")
        assert [tx.signature for tx in result] == ["S2", "S5"]

    async def test_search_with_disabled_analyzer(self, aliases):
        view, _ = _view(aliases, [_page()], analyzer=QueryAnalyzer(api_key=""))
        await view.load_more()
        result = await view.search("sent usdc")
        assert [tx.signature for tx in result] == ["S1", "S4"]


class TestDisplay:
    def test_labels(self):
        assert type_label("UNKNOWN") == "General Transfer"
        assert type_label("TOKEN_MINT") == "TOKEN MINT"
        assert source_label("SYSTEM_PROGRAM") == "System Program"
        assert source_label("UNKNOWN") is None
        assert source_label("MAGIC_EDEN") == "MAGIC EDEN"

    def test_truncate_address(self):
        assert truncate_address(WALLET) == "9xQe...VFin"
        assert truncate_address(None) == ""
        assert truncate_address("short") == "short"

    def test_noise_type_shows_only_own_transfers(self):
        tx = make_tx(
            "SW",
            tx_type="SWAP",
            transfers=[
                make_transfer(USDC_MINT, 5.0, WALLET, STRANGER),
                make_transfer(BONK_MINT, 9.0, STRANGER, FRIEND),
            ],
        )
        assert [t.mint for t in visible_transfers(tx, WALLET)] == [USDC_MINT]

        plain = make_tx("TR", transfers=[make_transfer(BONK_MINT, 9.0, STRANGER, FRIEND)])
        assert len(visible_transfers(plain, WALLET)) == 1

    async def test_transaction_summary(self):
        cache = TokenMetadataCache(fetch=FakeMetadataFetcher({USDC_MINT: "USD Coin"}))
        await cache.resolve(USDC_MINT)
        tx = make_tx("SIGNATURE123", transfers=[make_transfer(USDC_MINT, 5.0, WALLET, FRIEND)])

        summary = build_transaction_summary(tx, WALLET, cache)

        assert summary["signature"] == "SIGNATURE123"
        assert summary["type_label"] == "TRANSFER"
        assert summary["source_label"] == "System Program"
        assert summary["time"].startswith("2024-01-25")
        transfer = summary["transfers"][0]
        assert transfer["token_name"] == "USD Coin"
        assert transfer["direction"] == "sent"
        assert transfer["counterparty"] == FRIEND


class TestMetadataFailures:
    @respx.mock
    async def test_malformed_asset_reply_keeps_view_usable(self, aliases):
        respx.post(settings.helius_rpc_url).mock(return_value=httpx.Response(200, json=[{"jsonrpc": "2.0"}]))
        page = [make_tx("S1", transfers=[make_transfer(USDC_MINT, 10.0, WALLET, FRIEND)])]
        view = SearchView(
            WALLET,
            aliases,
            controller=PaginationController(WALLET, fetch_page=FakePageFetcher([page])),
            metadata=TokenMetadataCache(),
        )

        assert await view.load_more()

        assert [tx.signature for tx in view.visible()] == ["S1"]
        assert view.metadata.display_name(USDC_MINT) == "Unknown Token"
