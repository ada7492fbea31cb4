from explorer.fetchers.asset_fetcher import fetch_asset_metadata
from explorer.fetchers.errors import UpstreamError
from explorer.fetchers.helius_fetcher import fetch_transaction_page

__all__ = ["UpstreamError", "fetch_asset_metadata", "fetch_transaction_page"]
