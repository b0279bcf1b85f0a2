"""Business logic services."""

from wallet_ledger.services.account_service import AccountService
from wallet_ledger.services.balance_service import BalanceService, validate_amount
from wallet_ledger.services.transfer_service import TransferService

__all__ = ["AccountService", "BalanceService", "TransferService", "validate_amount"]
