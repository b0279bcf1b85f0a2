"""Ledger entry creation shared by the balance and transfer engines."""

from datetime import datetime

from sqlalchemy.orm import Session

from wallet_ledger.models.account import Account
from wallet_ledger.models.enums import EntryKind
from wallet_ledger.models.ledger_entry import LedgerEntry
from wallet_ledger.money import Money


def append_entry(
    db: Session,
    account: Account,
    *,
    kind: EntryKind,
    amount: Money,
    description: str | None,
    balance_before: Money,
    balance_after: Money,
    created_at: datetime,
) -> LedgerEntry:
    """
    Add a validated ledger entry for account to the session.

    amount must already carry the sign for kind. Raises
    ValidationFailedError if the entry breaks an invariant;
    nothing is added in that case.
    """
    entry = LedgerEntry(
        account_id=account.id,
        kind=kind,
        amount=amount.amount,
        description=description,
        balance_before=balance_before.amount,
        balance_after=balance_after.amount,
        created_at=created_at,
    )
    entry.validate()
    db.add(entry)
    return entry
