"""
Error taxonomy for balance operations.

The engines raise these internally and convert them into
failure results at their public boundary. Anything that is
not a WalletError is unexpected and propagates to the caller.
"""

import enum


class ErrorKind(str, enum.Enum):
    """Machine-readable category carried by every failure result."""
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    SAME_ACCOUNT = "same_account"
    RECIPIENT_NOT_FOUND = "recipient_not_found"
    ACCOUNT_NOT_FOUND = "account_not_found"
    INVALID_OPERATION = "invalid_operation"
    INVALID_EMAIL = "invalid_email"
    DUPLICATE_EMAIL = "duplicate_email"
    VALIDATION_FAILED = "validation_failed"
    UNEXPECTED = "unexpected"


class WalletError(Exception):
    """Base class for expected, user-facing failures."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str):
        super().__init__(message)
        self.messages = [message]


class InvalidAmountError(WalletError):
    kind = ErrorKind.INVALID_AMOUNT


class InsufficientFundsError(WalletError):
    kind = ErrorKind.INSUFFICIENT_FUNDS


class SameAccountError(WalletError):
    kind = ErrorKind.SAME_ACCOUNT


class RecipientNotFoundError(WalletError):
    kind = ErrorKind.RECIPIENT_NOT_FOUND


class AccountNotFoundError(WalletError):
    kind = ErrorKind.ACCOUNT_NOT_FOUND


class InvalidOperationError(WalletError):
    kind = ErrorKind.INVALID_OPERATION


class InvalidEmailError(WalletError):
    kind = ErrorKind.INVALID_EMAIL


class DuplicateEmailError(WalletError):
    kind = ErrorKind.DUPLICATE_EMAIL


class ValidationFailedError(WalletError):
    """
    A persistence-level invariant rejected the write.

    Raised by model validators before flush, and used to wrap
    database integrity errors. Carries every message verbatim.
    """

    kind = ErrorKind.VALIDATION_FAILED

    def __init__(self, messages):
        if isinstance(messages, str):
            messages = [messages]
        super().__init__("; ".join(messages))
        self.messages = list(messages)
