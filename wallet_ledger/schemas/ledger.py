"""
Pydantic schemas for ledger entries and balance operations.

These define the API contract. They are separate from the
database models because the API shape and the storage shape
are often different.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from wallet_ledger.models.enums import EntryKind
from wallet_ledger.schemas.account import RawAmount


# --- Request Schemas ---

class BalanceOperationRequest(BaseModel):
    """A deposit or withdrawal requested by the account owner."""
    operation: str = Field(min_length=1, max_length=20)
    amount: RawAmount = None
    description: str | None = Field(default=None, max_length=255)


class TransferCreate(BaseModel):
    """A transfer to the account registered under to_email."""
    to_email: str = Field(min_length=1, max_length=255)
    amount: RawAmount = None
    description: str | None = Field(default=None, max_length=255)


# --- Response Schemas ---

class LedgerEntryResponse(BaseModel):
    """Single entry in results and API responses."""
    id: int
    account_id: int
    kind: EntryKind
    amount: Decimal
    description: str | None
    balance_before: Decimal
    balance_after: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}
