"""
Account locking and the atomic unit of work.

Every balance mutation runs inside locked_accounts(): the account
rows are locked before their balance is read, and the lock is
held until the new balance and its ledger entry are committed or
rolled back. Two layers are taken, always in ascending account id
order so that transfers in opposite directions cannot deadlock:

1. A process-local lock per account. This serializes writers on
   stores without row locks (SQLite) and avoids a round trip to
   the database just to wait.
2. SELECT ... FOR UPDATE on the account rows. On PostgreSQL this
   serializes writers across processes. SQLite ignores it.

Deposits, withdrawals and transfers all go through here, so they
share one locking rule and stay deadlock-free against each other.
"""

import logging
import threading
import weakref
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.orm import Session

from wallet_ledger.errors import AccountNotFoundError
from wallet_ledger.models.account import Account

logger = logging.getLogger(__name__)


class AccountLockManager:
    """
    Hands out one lock per account id.

    One instance must be shared by every session in the process,
    otherwise two requests would lock different objects.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # A lock lives only while some caller holds or waits on it
        self._locks: "weakref.WeakValueDictionary[int, threading.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, account_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(account_id, threading.Lock())

    @contextmanager
    def hold(self, *account_ids: int):
        """Acquire the locks for account_ids in ascending order."""
        ordered = sorted(set(account_ids))
        acquired = []
        try:
            for account_id in ordered:
                lock = self._lock_for(account_id)
                lock.acquire()
                acquired.append(lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()


# Shared by all engines unless a caller injects its own manager
account_locks = AccountLockManager()


@contextmanager
def locked_accounts(db: Session, locks: AccountLockManager, *account_ids: int):
    """
    Lock the given accounts and run the body as one atomic unit.

    Yields a dict of freshly loaded Account rows keyed by id.
    Commits when the body finishes; rolls back and re-raises on
    any exception, including cancellation, so no partial balance
    update or orphan ledger entry is ever committed.
    """
    with locks.hold(*account_ids) as ordered:
        try:
            # populate_existing: the balance must come from the locked
            # row, never from a stale copy in the identity map
            rows = db.execute(
                select(Account)
                .where(Account.id.in_(ordered))
                .order_by(Account.id)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalars().all()

            by_id = {account.id: account for account in rows}
            for account_id in ordered:
                if account_id not in by_id:
                    raise AccountNotFoundError(f"Account {account_id} not found")

            yield by_id
            db.commit()
        except BaseException:
            db.rollback()
            raise
