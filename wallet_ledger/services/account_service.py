"""
Account service — registration and account lookup.

This is the collaborator the engines rely on to turn an email
or id into an Account. It never mutates a balance after the
account has been created.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wallet_ledger.errors import (
    AccountNotFoundError,
    ErrorKind,
    ValidationFailedError,
)
from wallet_ledger.models.account import Account, EMAIL_PATTERN, normalize_email
from wallet_ledger.models.ledger_entry import LedgerEntry
from wallet_ledger.money import InvalidMoneyError, Money
from wallet_ledger.schemas.account import AccountSnapshot
from wallet_ledger.schemas.result import OperationResult

logger = logging.getLogger(__name__)


class AccountService:

    def __init__(self, db: Session):
        self.db = db

    def register(self, email: str, initial_balance=0) -> OperationResult:
        """
        Create an account with an optional opening balance.

        The email is normalized (trimmed, lowercased) before it
        is validated and checked for uniqueness.
        """
        normalized = normalize_email(email)
        if not normalized or not EMAIL_PATTERN.match(normalized):
            return OperationResult.failure(ErrorKind.INVALID_EMAIL, "Email is invalid")

        if self.find_by_email(normalized):
            return OperationResult.failure(
                ErrorKind.DUPLICATE_EMAIL, "Email has already been taken"
            )

        try:
            balance = Money.parse(0 if initial_balance is None else initial_balance)
        except InvalidMoneyError:
            return OperationResult.failure(
                ErrorKind.VALIDATION_FAILED, "Balance is not a number"
            )

        account = Account(email=normalized, balance=balance.amount)
        try:
            account.validate()
            self.db.add(account)
            self.db.commit()
        except ValidationFailedError as e:
            self.db.rollback()
            return OperationResult.from_error(e)
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            self.db.rollback()
            return OperationResult.failure(
                ErrorKind.DUPLICATE_EMAIL, "Email has already been taken"
            )

        logger.info("Account registered", extra={"account_id": account.id})
        return OperationResult.ok(account=AccountSnapshot.model_validate(account))

    def get_account(self, account_id: int) -> Account:
        """Get an account by ID."""
        account = self.db.get(Account, account_id)
        if not account:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account

    def find_by_email(self, email: str | None) -> Account | None:
        """Find an account by email, ignoring case and surrounding spaces."""
        normalized = normalize_email(email)
        if not normalized:
            return None
        return self.db.execute(
            select(Account).where(Account.email == normalized)
        ).scalar_one_or_none()

    def resolve(self, identifier) -> Account | None:
        """
        Resolve a transfer recipient.

        Integers are account ids, anything else is treated as
        an email. Returns None when no account matches.
        """
        if isinstance(identifier, int) and not isinstance(identifier, bool):
            return self.db.get(Account, identifier)
        if isinstance(identifier, str):
            return self.find_by_email(identifier)
        return None

    def list_entries(self, account: Account) -> list[LedgerEntry]:
        """Return all entries for an account, newest first."""
        entries = self.db.execute(
            select(LedgerEntry)
            .where(LedgerEntry.account_id == account.id)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
        ).scalars().all()
        return list(entries)
