"""
Ledger entry model.

Each entry records one balance change on one account, with a
snapshot of the balance before and after. Entries are immutable:
once committed they are never modified or deleted.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wallet_ledger.errors import ValidationFailedError
from wallet_ledger.models.base import Base
from wallet_ledger.models.enums import EntryKind


class LedgerEntry(Base):
    """
    An immutable record of one balance change.

    amount is signed: positive for deposit and transfer_in,
    negative for withdrawal and transfer_out, never zero.
    balance_after always equals balance_before + amount.
    """

    __tablename__ = "ledger_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    kind: Mapped[EntryKind] = mapped_column(
        SAEnum(
            EntryKind,
            name="entry_kind_enum",
            create_constraint=True,
            values_callable=lambda kinds: [k.value for k in kinds],
        ),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    balance_before: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )
    balance_after: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )

    account: Mapped["Account"] = relationship(back_populates="entries")

    def validate(self) -> None:
        """
        Check the entry before it is flushed.

        Raises ValidationFailedError listing every problem found.
        """
        errors = []
        if self.amount is None:
            errors.append("Amount can't be blank")
        elif Decimal(self.amount) == 0:
            errors.append("Amount cannot be zero")
        try:
            kind = EntryKind(self.kind)
        except ValueError:
            kind = None
            errors.append("Kind is not included in the list")

        for field in ("balance_before", "balance_after"):
            label = field.replace("_", " ").capitalize()
            value = getattr(self, field)
            if value is None:
                errors.append(f"{label} can't be blank")
            elif Decimal(value) < 0:
                errors.append(f"{label} must be greater than or equal to 0")

        if not errors:
            amount = Decimal(self.amount)
            if Decimal(self.balance_after) != Decimal(self.balance_before) + amount:
                errors.append("Balance after must equal balance before plus amount")
            if kind.is_credit != (amount > 0):
                errors.append(f"Amount has the wrong sign for {kind.value}")

        if errors:
            raise ValidationFailedError(errors)

    @property
    def is_deposit(self) -> bool:
        return self.kind == EntryKind.DEPOSIT

    @property
    def is_withdrawal(self) -> bool:
        return self.kind == EntryKind.WITHDRAWAL

    @property
    def is_transfer(self) -> bool:
        return self.kind in (EntryKind.TRANSFER_IN, EntryKind.TRANSFER_OUT)

    def __repr__(self) -> str:
        return f"<LedgerEntry {self.kind.value} {self.amount}>"
