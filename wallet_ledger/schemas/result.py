"""
Uniform result shape returned by every engine operation.

A result is either a success carrying an operation-specific
payload, or a failure carrying an error kind and at least one
message suitable for direct display. The API layer maps it to
a response without branching on which engine produced it.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from wallet_ledger.errors import ErrorKind, WalletError
from wallet_ledger.schemas.account import AccountSnapshot
from wallet_ledger.schemas.ledger import LedgerEntryResponse


class TransferSummary(BaseModel):
    amount: Decimal
    from_account: AccountSnapshot
    to_account: AccountSnapshot
    description: str | None


class OperationResult(BaseModel):
    success: bool
    error_kind: ErrorKind | None = None
    errors: list[str] = Field(default_factory=list)

    # Payload; which fields are set depends on the operation
    balance: Decimal | None = None
    account: AccountSnapshot | None = None
    entry: LedgerEntryResponse | None = None
    transfer: TransferSummary | None = None
    entries: list[LedgerEntryResponse] | None = None

    @classmethod
    def ok(cls, **payload) -> "OperationResult":
        return cls(success=True, **payload)

    @classmethod
    def failure(cls, kind: ErrorKind, messages) -> "OperationResult":
        if isinstance(messages, str):
            messages = [messages]
        messages = [m for m in messages if m] or [kind.value.replace("_", " ").capitalize()]
        return cls(success=False, error_kind=kind, errors=messages)

    @classmethod
    def from_error(cls, error: WalletError) -> "OperationResult":
        return cls.failure(error.kind, error.messages)
