"""
Labels and JSON summaries for transactions shown in the history view.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from explorer.cache.metadata import TokenMetadataCache
from explorer.models.transaction import UNKNOWN_TYPE, TokenTransfer, Transaction
from explorer.pagination.controller import NOISE_TYPES

GENERAL_TRANSFER_LABEL = "General Transfer"
SYSTEM_PROGRAM_SOURCE = "SYSTEM_PROGRAM"


def truncate_address(address: str | None) -> str:
    address = address or ""
    if len(address) > 8:
        return f"{address[:4]}...{address[-4:]}"
    return address


def type_label(tx_type: str) -> str:
    if tx_type == UNKNOWN_TYPE:
        return GENERAL_TRANSFER_LABEL
    return tx_type.replace("_", " ")


def source_label(source: str) -> str | None:
    if source == UNKNOWN_TYPE:
        return None
    if source == SYSTEM_PROGRAM_SOURCE:
        return "System Program"
    return source.replace("_", " ")


def format_timestamp(timestamp: int | None) -> str | None:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def transfer_direction(transfer: TokenTransfer, account: str) -> str:
    return "sent" if transfer.from_user_account == account else "received"


def visible_transfers(
    transaction: Transaction,
    account: str,
    noise_types: Iterable[str] = NOISE_TYPES,
) -> list[TokenTransfer]:
    """Noise-type transactions only show the transfers touching ``account``."""
    if transaction.type in frozenset(noise_types):
        return [t for t in transaction.token_transfers if t.involves(account)]
    return list(transaction.token_transfers)


def build_transfer_summary(transfer: TokenTransfer, account: str, metadata: TokenMetadataCache) -> dict:
    direction = transfer_direction(transfer, account)
    meta = metadata.get(transfer.mint)
    counterparty = transfer.to_user_account if direction == "sent" else transfer.from_user_account
    return {
        "mint": transfer.mint,
        "token_name": metadata.display_name(transfer.mint),
        "token_image": meta.image if meta else "",
        "amount": transfer.token_amount,
        "direction": direction,
        "counterparty": counterparty,
        "counterparty_short": truncate_address(counterparty),
    }


def build_transaction_summary(
    transaction: Transaction,
    account: str,
    metadata: TokenMetadataCache,
    noise_types: Iterable[str] = NOISE_TYPES,
) -> dict:
    return {
        "signature": transaction.signature,
        "signature_short": truncate_address(transaction.signature),
        "type": transaction.type,
        "type_label": type_label(transaction.type),
        "source": transaction.source,
        "source_label": source_label(transaction.source),
        "description": transaction.description,
        "timestamp": transaction.timestamp,
        "time": format_timestamp(transaction.timestamp),
        "transfers": [
            build_transfer_summary(t, account, metadata)
            for t in visible_transfers(transaction, account, noise_types)
        ],
    }
