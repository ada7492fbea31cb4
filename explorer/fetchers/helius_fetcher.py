import logging

import httpx
from pydantic import ValidationError

from explorer.config import settings
from explorer.fetchers.errors import UpstreamError
from explorer.models.transaction import Transaction

logger = logging.getLogger(__name__)
API_TIMEOUT = 10.0


def _page_url(account: str) -> str:
    return f"{settings.helius_api_url}/v0/addresses/{account}/transactions"


async def fetch_transaction_page(account: str, before: str | None = None) -> list[Transaction]:
    url = _page_url(account)
    params = {"api-key": settings.helius_api_key}
    if before:
        params["before"] = before
    if settings.page_size:
        params["limit"] = settings.page_size

    logger.info("HELIUS: fetching page for %s before=%s", account[:12], before[:12] if before else None)

    async with httpx.AsyncClient(timeout=API_TIMEOUT) as client:
        try:
            resp = await client.get(url, params=params)
        except httpx.TimeoutException:
            logger.error("HELIUS TIMEOUT for %s", account[:12])
            raise UpstreamError("Transaction history request timed out")
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Transaction history request failed: {exc}")

    logger.info("HELIUS RESPONSE: status=%s, body_len=%d", resp.status_code, len(resp.content))
    if resp.status_code != 200:
        raise UpstreamError(f"Transaction history request returned {resp.status_code}")

    try:
        records = resp.json()
    except ValueError:
        raise UpstreamError("Transaction history response is not JSON")

    if not isinstance(records, list):
        raise UpstreamError("Transaction history response is not a list")

    try:
        return [Transaction.model_validate(record) for record in records]
    except ValidationError as exc:
        raise UpstreamError(f"Malformed transaction record: {exc.error_count()} errors")
