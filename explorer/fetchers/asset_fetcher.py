import logging

import httpx

from explorer.config import settings
from explorer.fetchers.errors import UpstreamError
from explorer.models.criteria import UNKNOWN_TOKEN_NAME, TokenMetadata

logger = logging.getLogger(__name__)
RPC_TIMEOUT = 5.0


async def fetch_asset_metadata(mint: str) -> TokenMetadata:
    url = settings.helius_rpc_url
    payload = {
        "jsonrpc": "2.0",
        "id": "explorer",
        "method": "getAsset",
        "params": {"id": mint},
    }

    async with httpx.AsyncClient(timeout=RPC_TIMEOUT) as client:
        try:
            resp = await client.post(url, json=payload)
        except (httpx.TimeoutException, httpx.HTTPError) as exc:
            logger.debug("getAsset failed for %s: %s", mint, exc)
            raise UpstreamError(f"Asset lookup failed for {mint}")

    if resp.status_code != 200:
        raise UpstreamError(f"Asset lookup for {mint} returned {resp.status_code}")

    try:
        body = resp.json()
    except ValueError:
        raise UpstreamError(f"Asset lookup for {mint} returned invalid JSON")

    if not isinstance(body, dict):
        raise UpstreamError(f"Asset lookup for {mint} returned an unexpected payload")

    if body.get("error"):
        logger.debug("getAsset RPC error for %s: %s", mint, body["error"])
        raise UpstreamError(f"Asset lookup for {mint} returned an RPC error")

    result = body.get("result")
    content = result.get("content") if isinstance(result, dict) else None
    if not isinstance(content, dict):
        raise UpstreamError(f"Asset lookup for {mint} has no content")

    links = content.get("links")
    metadata = content.get("metadata")
    if not isinstance(links, dict):
        links = {}
    if not isinstance(metadata, dict):
        metadata = {}
    name = metadata.get("name")
    image = links.get("image")
    return TokenMetadata(
        name=name if isinstance(name, str) and name else UNKNOWN_TOKEN_NAME,
        image=image if isinstance(image, str) else "",
    )
