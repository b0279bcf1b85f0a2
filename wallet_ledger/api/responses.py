"""Turn engine results into HTTP responses."""

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from wallet_ledger.errors import AccountNotFoundError
from wallet_ledger.models.account import Account
from wallet_ledger.schemas.result import OperationResult
from wallet_ledger.services.account_service import AccountService

FAILURE_STATUS = 422


def render_result(result: OperationResult, success_status: int = 200) -> JSONResponse:
    """Success gets success_status, any failure gets 422."""
    status = success_status if result.success else FAILURE_STATUS
    return JSONResponse(
        status_code=status,
        content=result.model_dump(mode="json", exclude_none=True),
    )


def acting_account(db: Session, account_id: int) -> Account:
    """Load the account a request acts as, or answer 404."""
    try:
        return AccountService(db).get_account(account_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
