"""
Account model.

An account holds a balance and owns the ledger entries that
explain how the balance got there. The balance is mutated only
by the balance and transfer engines, always under an account
lock and always together with a new ledger entry.
"""

import re
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint, String, DateTime, Numeric,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from wallet_ledger.errors import ValidationFailedError
from wallet_ledger.models.base import Base

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: str | None) -> str | None:
    """Lowercase and trim an email; None passes through."""
    if email is None:
        return None
    return email.strip().lower()


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        # Last line of defence: the database refuses negative balances
        # even if a code path forgets to check.
        CheckConstraint("balance >= 0", name="positive_balance"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Newest first, the order entries are displayed in
    entries: Mapped[list["LedgerEntry"]] = relationship(
        back_populates="account",
        order_by="desc(LedgerEntry.created_at)",
    )

    @validates("email")
    def _normalize_email(self, key, value):
        return normalize_email(value)

    def validate(self) -> None:
        """
        Check the account before it is flushed.

        Raises ValidationFailedError listing every problem found.
        """
        errors = []
        if not self.email or not EMAIL_PATTERN.match(self.email):
            errors.append("Email is invalid")
        if self.balance is None:
            errors.append("Balance can't be blank")
        elif Decimal(self.balance) < 0:
            errors.append("Balance must be greater than or equal to 0")
        if errors:
            raise ValidationFailedError(errors)

    def __repr__(self) -> str:
        return f"<Account {self.id} {self.email} balance={self.balance}>"
