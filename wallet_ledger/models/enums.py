"""
Shared enumerations for database models.

Enums mapped to database enums mean an unknown entry kind is
rejected by the database, not just by Python validation.
"""

import enum


class EntryKind(str, enum.Enum):
    """What kind of balance change a ledger entry records."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"

    @property
    def is_credit(self) -> bool:
        """True if this kind increases the owner's balance."""
        return self in (EntryKind.DEPOSIT, EntryKind.TRANSFER_IN)
