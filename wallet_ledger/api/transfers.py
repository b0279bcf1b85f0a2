"""
Transfer API endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wallet_ledger.api.responses import acting_account, render_result
from wallet_ledger.models.base import get_db
from wallet_ledger.schemas.ledger import TransferCreate
from wallet_ledger.services.transfer_service import TransferService

router = APIRouter(prefix="/accounts", tags=["Transfers"])


@router.post("/{account_id}/transfers", status_code=201)
def create_transfer(
    account_id: int,
    request: TransferCreate,
    db: Session = Depends(get_db),
):
    """Transfer money to the account registered under to_email."""
    account = acting_account(db, account_id)
    result = TransferService(db).transfer_by_email(
        account, request.to_email, request.amount, request.description
    )
    return render_result(result, success_status=201)
