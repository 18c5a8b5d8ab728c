"""
Request dependencies: ledger access, technician credentials and mapping of
ledger results onto HTTP errors
"""

from decimal import Decimal
import hmac

from fastapi import Header, HTTPException, Request, status

from ..config import LedgerConfig
from ..currency import decimal_from_string, parse_positive_amount
from ..ledger import Ledger
from ..results import ErrorKind, Result


ERROR_STATUS = {
    ErrorKind.INVALID_AMOUNT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_ACCOUNT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.SAME_ACCOUNT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTH_FAILURE: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INSUFFICIENT_FUNDS: status.HTTP_409_CONFLICT,
    ErrorKind.INSUFFICIENT_POOL_CASH: status.HTTP_409_CONFLICT,
    ErrorKind.DUPLICATE_ID: status.HTTP_409_CONFLICT,
    ErrorKind.IO_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_ledger(request: Request) -> Ledger:
    return request.app.state.ledger


def get_app_config(request: Request) -> LedgerConfig:
    return request.app.state.config


def require_technician(
    request: Request,
    x_technician_id: str = Header(...),
    x_technician_pin: str = Header(...)
) -> str:
    """Check technician console credentials; returns the actor to log"""
    config = get_app_config(request)
    id_ok = hmac.compare_digest(x_technician_id.strip().lower().encode(), config.technician_id.lower().encode())
    pin_ok = hmac.compare_digest(x_technician_pin.encode(), config.technician_pin.encode())
    if not (id_ok and pin_ok):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid technician credentials")
    return config.technician_actor


def unwrap_or_raise(result: Result):
    """Return the result value or raise the matching HTTPException"""
    if not result.ok:
        raise HTTPException(
            status_code=ERROR_STATUS.get(result.error, status.HTTP_400_BAD_REQUEST),
            detail={"error": result.error.value, "message": result.message}
        )
    return result.value


def parse_amount(raw: str) -> Decimal:
    """Parse a user-entered amount; must be positive"""
    try:
        return parse_positive_amount(raw)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def parse_balance(raw: str) -> Decimal:
    """Parse a user-entered opening balance; zero is allowed"""
    try:
        return decimal_from_string(raw)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
