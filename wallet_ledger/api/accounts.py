"""
Account and balance API endpoints.

The API layer is thin: it resolves the acting account, hands the
raw request values to the services and maps the result to a
status code. All business rules live in the services.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wallet_ledger.api.responses import acting_account, render_result
from wallet_ledger.models.base import get_db
from wallet_ledger.schemas.account import AccountCreate, AccountResponse
from wallet_ledger.schemas.ledger import BalanceOperationRequest, LedgerEntryResponse
from wallet_ledger.services.account_service import AccountService
from wallet_ledger.services.balance_service import BalanceService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", status_code=201)
def register_account(
    request: AccountCreate,
    db: Session = Depends(get_db),
):
    """Register a new account with an optional opening balance."""
    service = AccountService(db)
    result = service.register(request.email, request.initial_balance)
    return render_result(result, success_status=201)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Get account details."""
    return acting_account(db, account_id)


@router.get("/{account_id}/balance")
def get_balance(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Current balance. Read without locking, for display only."""
    account = acting_account(db, account_id)
    return render_result(BalanceService(db).get_balance(account))


@router.patch("/{account_id}/balance")
def update_balance(
    account_id: int,
    request: BalanceOperationRequest,
    db: Session = Depends(get_db),
):
    """
    Deposit into or withdraw from the account.

    operation is "deposit" or "withdraw". Rejected operations
    answer 422 with the error kind and messages.
    """
    account = acting_account(db, account_id)
    result = BalanceService(db).process_balance_operation(
        account, request.operation, request.amount, request.description
    )
    return render_result(result)


@router.get(
    "/{account_id}/entries",
    response_model=list[LedgerEntryResponse],
)
def list_entries(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Get all ledger entries for an account, newest first."""
    account = acting_account(db, account_id)
    return AccountService(db).list_entries(account)
