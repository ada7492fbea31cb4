from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from explorer.models.criteria import FilterCriteria
from explorer.models.transaction import TokenTransfer, Transaction

AMOUNT_TOLERANCE = 1e-9


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _within_dates(transaction: Transaction, criteria: FilterCriteria) -> bool:
    if criteria.date_start is None and criteria.date_end is None:
        return True
    if transaction.timestamp is None:
        return False

    when = datetime.fromtimestamp(transaction.timestamp, tz=timezone.utc)
    if criteria.date_start is not None and when < _as_utc(criteria.date_start):
        return False
    if criteria.date_end is not None and when > _as_utc(criteria.date_end):
        return False
    return True


def transfer_matches(transfer: TokenTransfer, criteria: FilterCriteria, account: str) -> bool:
    if criteria.token and transfer.mint != criteria.token:
        return False
    if criteria.action == "send" and transfer.from_user_account != account:
        return False
    if criteria.action == "receive" and transfer.to_user_account != account:
        return False
    if criteria.destination and transfer.to_user_account != criteria.destination:
        return False
    if criteria.source and transfer.from_user_account != criteria.source:
        return False
    if criteria.amount is not None and abs(transfer.token_amount - criteria.amount) > AMOUNT_TOLERANCE:
        return False
    return True


def matches(transaction: Transaction, criteria: FilterCriteria, account: str) -> bool:
    """Whether ``transaction`` satisfies ``criteria`` for the tracked ``account``.

    Transfer-level fields must all hold on one single transfer; they are
    never combined across different transfers of the same transaction.
    """
    if criteria.is_empty():
        return True

    if criteria.type and transaction.type != criteria.type:
        return False

    if not _within_dates(transaction, criteria):
        return False

    if not transaction.token_transfers:
        return not criteria.has_transfer_fields()

    return any(transfer_matches(t, criteria, account) for t in transaction.token_transfers)


def filter_transactions(
    transactions: Iterable[Transaction],
    criteria: FilterCriteria,
    account: str,
) -> list[Transaction]:
    if criteria.is_empty():
        return list(transactions)
    return [tx for tx in transactions if matches(tx, criteria, account)]
