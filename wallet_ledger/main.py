"""
Wallet Ledger: FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from wallet_ledger.config import get_settings
from wallet_ledger.errors import ErrorKind
from wallet_ledger.logging_config import setup_logging
from wallet_ledger.api.health import router as health_router
from wallet_ledger.api.accounts import router as accounts_router
from wallet_ledger.api.transfers import router as transfers_router

settings = get_settings()
setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)

logger = logging.getLogger("wallet_ledger.api")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    description="Digital wallet balances with an immutable ledger",
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(transfers_router)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    """
    Last resort for failures the services did not expect.

    The atomic unit has already rolled back by the time the
    exception gets here; log it and answer with a generic error.
    """
    logger.error(
        "Internal server error: %s", exc,
        exc_info=exc,
        extra={"path": request.url.path, "error_class": type(exc).__name__},
    )
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error_kind": ErrorKind.UNEXPECTED.value,
            "errors": ["Internal server error"],
        },
    )
