"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from wallet_ledger.models.base import Base
from wallet_ledger.models.enums import EntryKind
from wallet_ledger.models.account import Account
from wallet_ledger.models.ledger_entry import LedgerEntry

__all__ = [
    "Base",
    "EntryKind",
    "Account",
    "LedgerEntry",
]
