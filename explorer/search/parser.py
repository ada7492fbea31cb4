"""
Keyword parser turning a free-text search into ``FilterCriteria``.

Single left-to-right scan with one word of lookahead. ``to``/``from``
followed by a known alias bind destination/source and consume both words.
Every other word is tried as a token name (alias table first, then resolved
metadata names). Later matches overwrite earlier ones for the same field.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from explorer.models.criteria import FilterCriteria, TokenMetadata
from explorer.tokens.aliases import AliasTable

logger = logging.getLogger(__name__)

# word -> (criteria field, value)
KEYWORDS: dict[str, tuple[str, str]] = {
    "send": ("action", "send"),
    "sent": ("action", "send"),
    "receive": ("action", "receive"),
    "received": ("action", "receive"),
    "swap": ("type", "SWAP"),
    "swapped": ("type", "SWAP"),
    "mint": ("type", "TOKEN_MINT"),
    "minted": ("type", "TOKEN_MINT"),
}

DIRECTIONS: dict[str, str] = {
    "to": "destination",
    "from": "source",
}


class MetadataSource(Protocol):
    def items(self) -> Iterable[tuple[str, TokenMetadata]]: ...


def _match_metadata_name(word: str, metadata: MetadataSource | None) -> str | None:
    if metadata is None:
        return None
    for mint, meta in metadata.items():
        if meta.name.lower() == word:
            return mint
    return None


def resolve_token_word(word: str, aliases: AliasTable, metadata: MetadataSource | None = None) -> str | None:
    word = word.strip().lower()
    if not word:
        return None
    return aliases.resolve(word) or _match_metadata_name(word, metadata)


def parse_query(
    query: str,
    aliases: AliasTable,
    metadata: MetadataSource | None = None,
) -> FilterCriteria:
    words = (query or "").lower().split()
    if not words:
        return FilterCriteria()

    fields: dict[str, str] = {}
    i = 0
    while i < len(words):
        word = words[i]
        next_word = words[i + 1] if i + 1 < len(words) else None

        if word in DIRECTIONS and next_word is not None:
            target = aliases.resolve(next_word)
            if target:
                fields[DIRECTIONS[word]] = target
                logger.debug("parse: %s %s -> %s=%s", word, next_word, DIRECTIONS[word], target)
                i += 2
                continue

        keyword = KEYWORDS.get(word)
        if keyword:
            field, value = keyword
            fields[field] = value

        token = resolve_token_word(word, aliases, metadata)
        if token:
            fields["token"] = token
            logger.debug("parse: %s -> token=%s", word, token)

        i += 1

    return FilterCriteria(**fields)
