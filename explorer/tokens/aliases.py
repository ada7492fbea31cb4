"""
Static alias table mapping human-readable names to canonical identifiers.

Entries are stored the way the JSON file is written, canonical id -> display
name. Lookups from a query word go through a lowercased reverse index.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

logger = logging.getLogger(__name__)

DEFAULT_ALIAS_PATH = Path(__file__).parent / "aliases.json"


class AliasTable:
    def __init__(self, entries: Mapping[str, str] | None = None):
        self._entries = MappingProxyType(dict(entries or {}))
        self._by_display: dict[str, str] = {}
        for canonical_id, display in self._entries.items():
            # first entry wins when two ids share a display name
            self._by_display.setdefault(display.strip().lower(), canonical_id)

    def resolve(self, word: str) -> str | None:
        return self._by_display.get(word.strip().lower())

    def display_name(self, canonical_id: str) -> str | None:
        return self._entries.get(canonical_id)

    @property
    def entries(self) -> Mapping[str, str]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, canonical_id: object) -> bool:
        return canonical_id in self._entries


def load_alias_table(path: Path | str | None = None) -> AliasTable:
    alias_path = Path(path) if path else DEFAULT_ALIAS_PATH
    with open(alias_path) as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Alias table {alias_path} must be a JSON object")
    logger.info("Loaded %d aliases from %s", len(raw), alias_path)
    return AliasTable({str(k): str(v) for k, v in raw.items()})
