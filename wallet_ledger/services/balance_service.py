"""
Balance service — deposits, withdrawals and balance queries.

Each mutation:
1. Parses and validates the raw amount
2. Locks the account (see locking.locked_accounts)
3. Reads the locked balance and computes the new one
4. Writes the new balance and appends one ledger entry
5. Commits, then releases the lock

Steps 2-5 are one atomic unit. Expected failures (bad amount,
insufficient funds, rejected write) come back as a failure
result. Anything else is rolled back and re-raised.
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wallet_ledger.errors import (
    AccountNotFoundError,
    ErrorKind,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidOperationError,
    WalletError,
)
from wallet_ledger.models.account import Account
from wallet_ledger.models.enums import EntryKind
from wallet_ledger.models.ledger_entry import LedgerEntry
from wallet_ledger.money import InvalidMoneyError, Money, MoneyOutOfRangeError
from wallet_ledger.schemas.account import AccountSnapshot
from wallet_ledger.schemas.ledger import LedgerEntryResponse
from wallet_ledger.schemas.result import OperationResult
from wallet_ledger.services.entries import append_entry
from wallet_ledger.services.locking import (
    AccountLockManager,
    account_locks,
    locked_accounts,
)

logger = logging.getLogger(__name__)

# Abuse guard: no single operation may move more than this
MAX_OPERATION_AMOUNT = Money("1000000")

OPERATION_LABELS = {
    "deposit": "Deposit",
    "withdrawal": "Withdrawal",
    "transfer": "Transfer",
}


def validate_amount(raw, operation: str = "deposit") -> Money:
    """
    Parse a raw amount and check it against the operation limits.

    Raises InvalidAmountError if the amount is missing, not a
    number, not positive after rounding to cents, or above
    MAX_OPERATION_AMOUNT. Has no side effects.
    """
    label = OPERATION_LABELS.get(operation, operation.capitalize())
    try:
        amount = Money.parse(raw)
    except MoneyOutOfRangeError as e:
        if e.value > 0:
            raise InvalidAmountError(f"{label} amount too large") from None
        raise InvalidAmountError(f"{label} amount must be positive") from None
    except InvalidMoneyError:
        raise InvalidAmountError(f"{label} amount must be positive") from None

    if not amount.is_positive():
        raise InvalidAmountError(f"{label} amount must be positive")
    if amount > MAX_OPERATION_AMOUNT:
        raise InvalidAmountError(f"{label} amount too large")
    return amount


def integrity_failure(error: IntegrityError) -> OperationResult:
    """Report a write the database refused as a validation failure."""
    message = str(error.orig) if error.orig is not None else str(error)
    return OperationResult.failure(ErrorKind.VALIDATION_FAILED, [message])


class BalanceService:
    """
    Deposits and withdrawals against a single account.

    The session, lock manager and clock are injected so callers
    and tests control the unit of work and entry timestamps.
    """

    def __init__(
        self,
        db: Session,
        locks: AccountLockManager | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.locks = locks or account_locks
        self.clock = clock or datetime.utcnow

    def deposit(self, account: Account, amount, description: str | None = None) -> OperationResult:
        """Add amount to the account balance."""
        return self._run("deposit", account, amount, description)

    def withdraw(self, account: Account, amount, description: str | None = None) -> OperationResult:
        """
        Take amount from the account balance.

        Fails with insufficient_funds if the balance would go
        below zero; withdrawing the entire balance is allowed.
        """
        return self._run("withdrawal", account, amount, description)

    def process_balance_operation(
        self, account: Account, operation: str, amount, description: str | None = None
    ) -> OperationResult:
        """Dispatch a named operation ("deposit" or "withdraw")."""
        if operation == "deposit":
            return self.deposit(account, amount, description)
        if operation in ("withdraw", "withdrawal"):
            return self.withdraw(account, amount, description)
        return OperationResult.from_error(InvalidOperationError(
            f"Invalid operation: {operation!r} (expected 'deposit' or 'withdraw')"
        ))

    def get_balance(self, account: Account) -> OperationResult:
        """
        Return the current balance without taking a lock.

        The value is for display only and must never be used to
        decide a mutation.
        """
        current = None
        if account is not None:
            current = self.db.get(Account, account.id, populate_existing=True)
        if current is None:
            return OperationResult.from_error(AccountNotFoundError("Account not found"))

        return OperationResult.ok(
            balance=current.balance,
            account=AccountSnapshot.model_validate(current),
        )

    # --- internals ---

    def _run(self, operation: str, account: Account, amount, description) -> OperationResult:
        try:
            if account is None:
                raise AccountNotFoundError("Account not found")
            money = validate_amount(amount, operation)
            result = self._apply(operation, account, money, description)
        except WalletError as e:
            logger.info(
                "%s rejected: %s", OPERATION_LABELS[operation], e,
                extra={"account_id": getattr(account, "id", None), "error_kind": e.kind.value},
            )
            return OperationResult.from_error(e)
        except IntegrityError as e:
            logger.warning(
                "%s refused by database", OPERATION_LABELS[operation],
                extra={"account_id": account.id},
            )
            return integrity_failure(e)

        logger.info(
            "%s committed", OPERATION_LABELS[operation],
            extra={
                "account_id": account.id,
                "amount": str(result.entry.amount),
                "balance_after": str(result.entry.balance_after),
            },
        )
        return result

    def _apply(self, operation: str, account: Account, amount: Money, description) -> OperationResult:
        with locked_accounts(self.db, self.locks, account.id) as locked:
            target = locked[account.id]
            balance_before = Money(target.balance)

            if operation == "deposit":
                balance_after = balance_before + amount
            else:
                balance_after = balance_before - amount
                if balance_after.is_negative():
                    raise InsufficientFundsError("Insufficient funds")

            target.balance = balance_after.amount
            target.validate()

            if operation == "deposit":
                entry = self._create_deposit_entry(
                    target, amount, description, balance_before, balance_after
                )
            else:
                entry = self._create_withdrawal_entry(
                    target, amount, description, balance_before, balance_after
                )
            self.db.flush()

            # Snapshot while the lock is still held
            result = OperationResult.ok(
                account=AccountSnapshot.model_validate(target),
                entry=LedgerEntryResponse.model_validate(entry),
            )
        return result

    def _create_deposit_entry(
        self, account, amount: Money, description, balance_before, balance_after
    ) -> LedgerEntry:
        return append_entry(
            self.db, account,
            kind=EntryKind.DEPOSIT,
            amount=amount,
            description=(
                description if description is not None
                else f"Deposit of {amount}"
            ),
            balance_before=balance_before,
            balance_after=balance_after,
            created_at=self.clock(),
        )

    def _create_withdrawal_entry(
        self, account, amount: Money, description, balance_before, balance_after
    ) -> LedgerEntry:
        return append_entry(
            self.db, account,
            kind=EntryKind.WITHDRAWAL,
            amount=-amount,
            description=(
                description if description is not None
                else f"Withdrawal of {amount}"
            ),
            balance_before=balance_before,
            balance_after=balance_after,
            created_at=self.clock(),
        )
