import pytest

from explorer.fetchers import UpstreamError
from explorer.models.criteria import TokenMetadata
from explorer.models.transaction import Transaction
from explorer.tokens.aliases import AliasTable

WALLET = "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin"
FRIEND = "FriendWa11et1111111111111111111111111111111"
STRANGER = "StrangerWa11et11111111111111111111111111111"
EXCHANGE = "Exchange111111111111111111111111111111111111"

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
PEPE_MINT = "PepeMint11111111111111111111111111111111111"

TEST_ALIASES = {
    USDC_MINT: "usdc",
    BONK_MINT: "bonk",
    FRIEND: "alice",
    EXCHANGE: "exchange",
}


@pytest.fixture
def aliases() -> AliasTable:
    return AliasTable(TEST_ALIASES)


def make_record(
    signature: str,
    tx_type: str = "TRANSFER",
    transfers: list[dict] | None = None,
    timestamp: int | None = 1706140800,
    source: str = "SYSTEM_PROGRAM",
) -> dict:
    """A raw record shaped like the Helius enhanced transactions API."""
    return {
        "description": "",
        "type": tx_type,
        "source": source,
        "fee": 5000,
        "feePayer": WALLET,
        "signature": signature,
        "slot": 250000000,
        "timestamp": timestamp,
        "tokenTransfers": transfers if transfers is not None else [],
        "nativeTransfers": [],
        "accountData": [],
        "events": {},
    }


def make_transfer(mint: str, amount: float, sender: str | None, receiver: str | None) -> dict:
    return {
        "fromTokenAccount": "",
        "toTokenAccount": "",
        "fromUserAccount": sender,
        "toUserAccount": receiver,
        "tokenAmount": amount,
        "mint": mint,
        "tokenStandard": "Fungible",
    }


def make_tx(signature: str, **kwargs) -> Transaction:
    return Transaction.model_validate(make_record(signature, **kwargs))


class FakePageFetcher:
    """Serves pre-built pages in order and records the cursors it was given."""

    def __init__(self, pages: list[list[Transaction]]):
        self.pages = list(pages)
        self.calls: list[tuple[str, str | None]] = []

    async def __call__(self, account: str, before: str | None = None) -> list[Transaction]:
        self.calls.append((account, before))
        if not self.pages:
            return []
        return self.pages.pop(0)


class FakeMetadataFetcher:
    def __init__(self, names: dict[str, str] | None = None, failing: set[str] | None = None):
        self.names = names or {}
        self.failing = failing or set()
        self.calls: list[str] = []

    async def __call__(self, mint: str) -> TokenMetadata:
        self.calls.append(mint)
        if mint in self.failing:
            raise UpstreamError(f"lookup failed for {mint}")
        return TokenMetadata(name=self.names.get(mint, "Unknown Token"), image=f"https://img/{mint[:4]}.png")


# --- Mock upstream payloads ---

MOCK_GET_ASSET = {
    "jsonrpc": "2.0",
    "id": "explorer",
    "result": {
        "interface": "FungibleToken",
        "id": USDC_MINT,
        "content": {
            "metadata": {"name": "USD Coin", "symbol": "USDC"},
            "links": {"image": "https://example.com/usdc.png"},
        },
    },
}

MOCK_GET_ASSET_NO_NAME = {
    "jsonrpc": "2.0",
    "id": "explorer",
    "result": {
        "id": PEPE_MINT,
        "content": {"metadata": {}, "links": {}},
    },
}

MOCK_GET_ASSET_ERROR = {
    "jsonrpc": "2.0",
    "id": "explorer",
    "error": {"code": -32000, "message": "Asset not found"},
}
