"""
Pydantic schemas for account registration and account snapshots.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

# Amounts arrive as JSON numbers or decimal strings and are parsed
# by the engines, so an unparseable value becomes a business failure
# instead of a request validation error.
RawAmount = Decimal | int | float | str | None


class AccountCreate(BaseModel):
    """Request to register a new account."""
    email: str = Field(min_length=1, max_length=255)
    initial_balance: RawAmount = 0


class AccountSnapshot(BaseModel):
    """The externally visible state of an account."""
    id: int
    email: str
    balance: Decimal

    model_config = {"from_attributes": True}


class AccountResponse(AccountSnapshot):
    created_at: datetime
    updated_at: datetime
