"""
Tests for the TransferService.
"""

from decimal import Decimal

import pytest

from wallet_ledger.errors import ErrorKind
from wallet_ledger.models.account import Account
from wallet_ledger.models.enums import EntryKind
from wallet_ledger.models.ledger_entry import LedgerEntry
from wallet_ledger.services.account_service import AccountService
from wallet_ledger.services.transfer_service import TransferService


@pytest.fixture
def sender(make_account):
    return make_account("sender@example.com", "1000.00")


@pytest.fixture
def recipient(make_account):
    return make_account("recipient@example.com", "200.00")


def entries_for(db_session, account):
    return AccountService(db_session).list_entries(account)


# --- Successful Transfers ---

class TestTransfer:

    def test_transfer_moves_money(self, db_session, sender, recipient):
        result = TransferService(db_session).transfer_by_email(
            sender, "recipient@example.com", "150.00"
        )

        assert result.success is True
        assert result.transfer.amount == Decimal("150.00")
        assert result.transfer.from_account.balance == Decimal("850.00")
        assert result.transfer.to_account.balance == Decimal("350.00")
        assert result.transfer.to_account.email == "recipient@example.com"

        assert sender.balance == Decimal("850.00")
        assert recipient.balance == Decimal("350.00")

    def test_transfer_records_one_entry_per_account(self, db_session, sender, recipient):
        result = TransferService(db_session).transfer_by_email(
            sender, "recipient@example.com", 250
        )

        out_entry, in_entry = result.entries
        assert out_entry.account_id == sender.id
        assert out_entry.kind == EntryKind.TRANSFER_OUT
        assert out_entry.amount == Decimal("-250.00")
        assert out_entry.balance_before == Decimal("1000.00")
        assert out_entry.balance_after == Decimal("750.00")
        assert out_entry.description == "Transfer to recipient@example.com"

        assert in_entry.account_id == recipient.id
        assert in_entry.kind == EntryKind.TRANSFER_IN
        assert in_entry.amount == Decimal("250.00")
        assert in_entry.balance_before == Decimal("200.00")
        assert in_entry.balance_after == Decimal("450.00")
        assert in_entry.description == "Transfer from sender@example.com"

        assert len(entries_for(db_session, sender)) == 1
        assert len(entries_for(db_session, recipient)) == 1

    def test_custom_description_used_on_both_sides(self, db_session, sender, recipient):
        result = TransferService(db_session).transfer_by_email(
            sender, "recipient@example.com", 100, "Payment for services"
        )

        assert [e.description for e in result.entries] == [
            "Payment for services", "Payment for services",
        ]
        assert result.transfer.description == "Payment for services"

    def test_empty_description_is_kept(self, db_session, sender, recipient):
        result = TransferService(db_session).transfer_by_email(
            sender, "recipient@example.com", 100, ""
        )

        assert [e.description for e in result.entries] == ["", ""]

    def test_total_balance_is_conserved(self, db_session, sender, recipient):
        total_before = sender.balance + recipient.balance

        TransferService(db_session).transfer_by_email(
            sender, "recipient@example.com", "123.45"
        )

        assert sender.balance == Decimal("876.55")
        assert recipient.balance == Decimal("323.45")
        assert sender.balance + recipient.balance == total_before

    def test_entire_balance_can_be_transferred(self, db_session, sender, recipient):
        result = TransferService(db_session).transfer_by_email(
            sender, "recipient@example.com", "1000.00"
        )

        assert result.success is True
        assert sender.balance == Decimal("0.00")

    @pytest.mark.parametrize("email", ["RECIPIENT@EXAMPLE.COM", "  recipient@example.com  "])
    def test_recipient_email_is_normalized(self, db_session, sender, recipient, email):
        result = TransferService(db_session).transfer_by_email(sender, email, 100)

        assert result.success is True
        assert result.transfer.to_account.email == "recipient@example.com"

    def test_recipient_by_id(self, db_session, sender, recipient):
        result = TransferService(db_session).transfer_by_email(sender, recipient.id, 100)

        assert result.success is True
        assert recipient.balance == Decimal("300.00")

    def test_opposite_transfers_both_succeed(self, db_session, sender, recipient):
        service = TransferService(db_session)

        assert service.transfer_by_email(sender, "recipient@example.com", 300).success
        assert service.transfer_by_email(recipient, "sender@example.com", 100).success

        assert sender.balance == Decimal("800.00")
        assert recipient.balance == Decimal("400.00")


# --- Rejected Transfers ---

class TestTransferRejected:

    def assert_nothing_changed(self, db_session, sender, recipient):
        assert sender.balance == Decimal("1000.00")
        assert recipient.balance == Decimal("200.00")
        assert db_session.query(LedgerEntry).count() == 0

    def test_unknown_recipient(self, db_session, sender, recipient):
        result = TransferService(db_session).transfer_by_email(
            sender, "nobody@example.com", 100
        )

        assert result.success is False
        assert result.error_kind == ErrorKind.RECIPIENT_NOT_FOUND
        assert result.errors == ["Recipient account not found"]
        self.assert_nothing_changed(db_session, sender, recipient)

    def test_unknown_recipient_checked_before_amount(self, db_session, sender):
        result = TransferService(db_session).transfer_by_email(
            sender, "nobody@example.com", -5
        )

        assert result.error_kind == ErrorKind.RECIPIENT_NOT_FOUND

    def test_same_account(self, db_session, sender, recipient):
        result = TransferService(db_session).transfer_by_email(
            sender, "sender@example.com", 100
        )

        assert result.success is False
        assert result.error_kind == ErrorKind.SAME_ACCOUNT
        assert result.errors == ["Cannot transfer to the same account"]
        self.assert_nothing_changed(db_session, sender, recipient)

    def test_same_account_checked_before_amount(self, db_session, sender):
        result = TransferService(db_session).transfer_by_email(
            sender, "sender@example.com", "garbage"
        )

        assert result.error_kind == ErrorKind.SAME_ACCOUNT

    @pytest.mark.parametrize("amount, message", [
        (-50, "Transfer amount must be positive"),
        (0, "Transfer amount must be positive"),
        (None, "Transfer amount must be positive"),
        ("abc", "Transfer amount must be positive"),
        (2_000_000, "Transfer amount too large"),
        ("1e30", "Transfer amount too large"),
        (10**30, "Transfer amount too large"),
    ])
    def test_invalid_amount(self, db_session, sender, recipient, amount, message):
        result = TransferService(db_session).transfer_by_email(
            sender, "recipient@example.com", amount
        )

        assert result.error_kind == ErrorKind.INVALID_AMOUNT
        assert result.errors == [message]
        self.assert_nothing_changed(db_session, sender, recipient)

    @pytest.mark.parametrize("amount", ["1500.00", "1000.01"])
    def test_insufficient_funds(self, db_session, sender, recipient, amount):
        result = TransferService(db_session).transfer_by_email(
            sender, "recipient@example.com", amount
        )

        assert result.error_kind == ErrorKind.INSUFFICIENT_FUNDS
        assert result.errors == ["Insufficient funds for transfer"]
        self.assert_nothing_changed(db_session, sender, recipient)

    def test_missing_sender(self, db_session, recipient):
        result = TransferService(db_session).transfer_by_email(
            None, "recipient@example.com", 100
        )

        assert result.error_kind == ErrorKind.ACCOUNT_NOT_FOUND


# --- Atomicity ---

class TestTransferAtomicity:

    def test_failure_on_receiving_side_rolls_back_everything(
        self, db_session, session_factory, sender, recipient, monkeypatch
    ):
        def explode(self, *args, **kwargs):
            raise RuntimeError("Transaction creation failed")

        monkeypatch.setattr(TransferService, "_create_transfer_in_entry", explode)

        with pytest.raises(RuntimeError, match="Transaction creation failed"):
            TransferService(db_session).transfer_by_email(
                sender, "recipient@example.com", 100
            )

        # Check from a separate session that nothing was committed
        fresh = session_factory()
        try:
            assert fresh.get(Account, sender.id).balance == Decimal("1000.00")
            assert fresh.get(Account, recipient.id).balance == Decimal("200.00")
            assert fresh.query(LedgerEntry).count() == 0
        finally:
            fresh.close()

    def test_cancellation_rolls_back(self, db_session, sender, recipient, monkeypatch):
        def interrupt(self, *args, **kwargs):
            raise KeyboardInterrupt

        monkeypatch.setattr(TransferService, "_create_transfer_out_entry", interrupt)

        with pytest.raises(KeyboardInterrupt):
            TransferService(db_session).transfer_by_email(
                sender, "recipient@example.com", 100
            )

        assert sender.balance == Decimal("1000.00")
        assert recipient.balance == Decimal("200.00")
        assert db_session.query(LedgerEntry).count() == 0
