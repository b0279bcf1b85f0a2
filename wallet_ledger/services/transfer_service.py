"""
Transfer service — moves money between two accounts.

Validation runs before any lock is taken, in this order, and the
first failing check wins:
1. Recipient exists
2. Sender and recipient differ
3. Amount is valid (same rule as deposits and withdrawals)
4. Sender balance covers the amount

Both accounts are then locked in ascending id order, the funds
check is repeated against the locked balance, and the two
balance updates plus the two ledger entries commit together.
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wallet_ledger.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    RecipientNotFoundError,
    SameAccountError,
    WalletError,
)
from wallet_ledger.models.account import Account
from wallet_ledger.models.enums import EntryKind
from wallet_ledger.models.ledger_entry import LedgerEntry
from wallet_ledger.money import Money
from wallet_ledger.schemas.account import AccountSnapshot
from wallet_ledger.schemas.ledger import LedgerEntryResponse
from wallet_ledger.schemas.result import OperationResult, TransferSummary
from wallet_ledger.services.account_service import AccountService
from wallet_ledger.services.balance_service import integrity_failure, validate_amount
from wallet_ledger.services.entries import append_entry
from wallet_ledger.services.locking import (
    AccountLockManager,
    account_locks,
    locked_accounts,
)

logger = logging.getLogger(__name__)


class TransferService:

    def __init__(
        self,
        db: Session,
        lookup: AccountService | None = None,
        locks: AccountLockManager | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.lookup = lookup or AccountService(db)
        self.locks = locks or account_locks
        self.clock = clock or datetime.utcnow

    def transfer_by_email(
        self,
        from_account: Account,
        to_email,
        amount,
        description: str | None = None,
    ) -> OperationResult:
        """
        Transfer amount from from_account to the account behind to_email.

        to_email is matched case-insensitively after trimming; an
        integer is accepted as an account id. An unknown recipient
        fails before the amount is looked at.
        """
        to_account = self.lookup.resolve(to_email)
        if to_account is None:
            logger.info("Transfer rejected: recipient not found")
            return OperationResult.from_error(
                RecipientNotFoundError("Recipient account not found")
            )
        return self._transfer(from_account, to_account, amount, description)

    def _transfer(self, from_account, to_account, amount, description) -> OperationResult:
        try:
            money = self._validate(from_account, to_account, amount)
            result = self._process(from_account, to_account, money, description)
        except WalletError as e:
            logger.info(
                "Transfer rejected: %s", e,
                extra={"account_id": getattr(from_account, "id", None), "error_kind": e.kind.value},
            )
            return OperationResult.from_error(e)
        except IntegrityError as e:
            logger.warning("Transfer refused by database", extra={"account_id": from_account.id})
            return integrity_failure(e)

        logger.info(
            "Transfer committed",
            extra={
                "from_account_id": result.transfer.from_account.id,
                "to_account_id": result.transfer.to_account.id,
                "amount": str(result.transfer.amount),
            },
        )
        return result

    def _validate(self, from_account, to_account, amount) -> Money:
        if from_account is None:
            raise AccountNotFoundError("Sender account not found")
        if to_account is None:
            raise RecipientNotFoundError("Recipient account not found")
        if from_account.id == to_account.id:
            raise SameAccountError("Cannot transfer to the same account")

        money = validate_amount(amount, "transfer")
        self._check_funds(from_account, money)
        return money

    @staticmethod
    def _check_funds(account: Account, amount: Money) -> None:
        # `<` on purpose: moving the exact balance leaves zero
        if Money(account.balance) < amount:
            raise InsufficientFundsError("Insufficient funds for transfer")

    def _process(self, from_account, to_account, amount: Money, description) -> OperationResult:
        with locked_accounts(self.db, self.locks, from_account.id, to_account.id) as locked:
            sender = locked[from_account.id]
            recipient = locked[to_account.id]

            # The pre-lock check may have seen a stale balance
            self._check_funds(sender, amount)

            from_before = Money(sender.balance)
            to_before = Money(recipient.balance)
            from_after = from_before - amount
            to_after = to_before + amount

            sender.balance = from_after.amount
            recipient.balance = to_after.amount
            sender.validate()
            recipient.validate()

            out_entry = self._create_transfer_out_entry(
                sender, recipient, amount, description, from_before, from_after
            )
            in_entry = self._create_transfer_in_entry(
                recipient, sender, amount, description, to_before, to_after
            )
            self.db.flush()

            result = OperationResult.ok(
                transfer=TransferSummary(
                    amount=amount.amount,
                    from_account=AccountSnapshot.model_validate(sender),
                    to_account=AccountSnapshot.model_validate(recipient),
                    description=out_entry.description,
                ),
                entries=[
                    LedgerEntryResponse.model_validate(out_entry),
                    LedgerEntryResponse.model_validate(in_entry),
                ],
            )
        return result

    def _create_transfer_out_entry(
        self, sender, recipient, amount: Money, description, balance_before, balance_after
    ) -> LedgerEntry:
        return append_entry(
            self.db, sender,
            kind=EntryKind.TRANSFER_OUT,
            amount=-amount,
            description=(
                description if description is not None
                else f"Transfer to {recipient.email}"
            ),
            balance_before=balance_before,
            balance_after=balance_after,
            created_at=self.clock(),
        )

    def _create_transfer_in_entry(
        self, recipient, sender, amount: Money, description, balance_before, balance_after
    ) -> LedgerEntry:
        return append_entry(
            self.db, recipient,
            kind=EntryKind.TRANSFER_IN,
            amount=amount,
            description=(
                description if description is not None
                else f"Transfer from {sender.email}"
            ),
            balance_before=balance_before,
            balance_after=balance_after,
            created_at=self.clock(),
        )
