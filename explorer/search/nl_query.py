"""
Optional natural-language query analysis through the Anthropic Messages API.

The analyzer asks the model for a small JSON object describing the search
and converts it into ``FilterCriteria``. Any failure returns None so callers
fall back to the keyword parser.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime

import httpx
from pydantic import ValidationError

from explorer.config import settings
from explorer.models.criteria import FilterCriteria
from explorer.search.parser import KEYWORDS, MetadataSource, resolve_token_word
from explorer.tokens.aliases import AliasTable

logger = logging.getLogger(__name__)

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
ANALYZE_TIMEOUT = 10.0

PROMPT_TEMPLATE = """Parse this transaction search query and return a JSON object. Only include non-empty fields:
{{
  "token": "",
  "action": "",
  "type": "",
  "amount": null,
  "date": "",
  "dateRange": {{"start": "", "end": ""}}
}}
token is a token name or symbol, action is send/receive/swap/mint, type is SWAP/TOKEN_MINT/etc,
amount is a number if specified, dates are ISO 8601.
Reply with the JSON object only.
Query: "{query}\""""


def _parse_date(value) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Ignoring unparseable date %r", value)
        return None


def _is_date_only(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _day_bounds(day: datetime) -> tuple[datetime, datetime]:
    start = day.replace(hour=0, minute=0, second=0, microsecond=0)
    end = day.replace(hour=23, minute=59, second=59, microsecond=999999)
    return start, end


def criteria_from_analysis(
    analysis: dict,
    aliases: AliasTable,
    metadata: MetadataSource | None = None,
) -> FilterCriteria | None:
    """Convert the analyzer's JSON reply into criteria; None when unusable."""
    if not isinstance(analysis, dict):
        return None

    fields: dict = {}

    token = analysis.get("token")
    if isinstance(token, str) and token.strip():
        resolved = resolve_token_word(token, aliases, metadata)
        if resolved:
            fields["token"] = resolved

    action = analysis.get("action")
    if isinstance(action, str) and action.strip().lower() in KEYWORDS:
        field, value = KEYWORDS[action.strip().lower()]
        fields[field] = value

    tx_type = analysis.get("type")
    if isinstance(tx_type, str) and tx_type.strip():
        fields["type"] = tx_type.strip().upper()

    amount = analysis.get("amount")
    if isinstance(amount, (int, float)) and not isinstance(amount, bool) and amount >= 0:
        fields["amount"] = float(amount)

    day = _parse_date(analysis.get("date"))
    if day is not None:
        fields["date_start"], fields["date_end"] = _day_bounds(day)

    date_range = analysis.get("dateRange")
    if isinstance(date_range, dict):
        start = _parse_date(date_range.get("start"))
        end = _parse_date(date_range.get("end"))
        if start is not None:
            fields["date_start"] = start
        if end is not None:
            # a bare date covers the whole end day
            fields["date_end"] = _day_bounds(end)[1] if _is_date_only(date_range.get("end")) else end

    try:
        return FilterCriteria(**fields)
    except ValidationError as exc:
        logger.debug("Analyzer reply rejected: %s", exc)
        return None


def merge_criteria(keyword: FilterCriteria, analyzed: FilterCriteria | None) -> FilterCriteria:
    """Fields set by the keyword parser win; the analysis fills the rest."""
    if analyzed is None:
        return keyword
    merged = analyzed.model_dump()
    for field, value in keyword.model_dump().items():
        if value not in ("", None):
            merged[field] = value
    return FilterCriteria(**merged)


class QueryAnalyzer:
    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.anthropic_model

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def analyze(self, query: str) -> dict | None:
        if not self.enabled or not query.strip():
            return None

        payload = {
            "model": self.model,
            "max_tokens": 1024,
            "temperature": 0,
            "messages": [{"role": "user", "content": PROMPT_TEMPLATE.format(query=query)}],
        }
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

        async with httpx.AsyncClient(timeout=ANALYZE_TIMEOUT) as client:
            try:
                resp = await client.post(ANTHROPIC_URL, json=payload, headers=headers)
            except (httpx.TimeoutException, httpx.HTTPError) as exc:
                logger.warning("Query analysis request failed: %s", exc)
                return None

        if resp.status_code != 200:
            logger.warning("Query analysis returned %s", resp.status_code)
            return None

        try:
            text = resp.json()["content"][0]["text"]
            parsed = json.loads(text)
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("Query analysis reply could not be parsed: %s", exc)
            return None

        return parsed if isinstance(parsed, dict) else None

    async def criteria(
        self,
        query: str,
        aliases: AliasTable,
        metadata: MetadataSource | None = None,
    ) -> FilterCriteria | None:
        analysis = await self.analyze(query)
        if analysis is None:
            return None
        return criteria_from_analysis(analysis, aliases, metadata)
