"""
Technician console endpoints
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from ..ledger import Ledger
from .dependencies import (
    get_ledger, parse_amount, parse_balance, require_technician, unwrap_or_raise
)
from .schemas import (
    AccountListResponse, AccountModel, AddAccountRequest, CashReserveModel,
    OperationResponse, RefillRequest, TransactionLogResponse
)


router = APIRouter()


@router.get("/accounts", response_model=AccountListResponse)
def list_accounts(ledger: Ledger = Depends(get_ledger), actor: str = Depends(require_technician)):
    """View every account together with the dispenser cash"""
    return AccountListResponse(
        cash_reserve=CashReserveModel.from_amount(ledger.cash_reserve()),
        accounts=[AccountModel.from_account(a) for a in ledger.list_accounts()]
    )


@router.post("/accounts", status_code=status.HTTP_201_CREATED, response_model=OperationResponse)
def add_account(
    request: AddAccountRequest,
    ledger: Ledger = Depends(get_ledger),
    actor: str = Depends(require_technician)
):
    """Open a new account"""
    balance = parse_balance(request.initial_balance)
    result = ledger.add_account(request.account_id, request.pin, request.name, balance)
    account = unwrap_or_raise(result)
    return OperationResponse(message=result.message, account=AccountModel.from_account(account))


@router.delete("/accounts/{account_id}", response_model=OperationResponse)
def remove_account(
    account_id: str,
    ledger: Ledger = Depends(get_ledger),
    actor: str = Depends(require_technician)
):
    """Close an account"""
    result = ledger.remove_account(account_id.strip())
    account = unwrap_or_raise(result)
    return OperationResponse(message=result.message, account=AccountModel.from_account(account))


@router.get("/cash", response_model=CashReserveModel)
def cash_reserve(ledger: Ledger = Depends(get_ledger), actor: str = Depends(require_technician)):
    return CashReserveModel.from_amount(ledger.cash_reserve())


@router.post("/cash/refill", response_model=CashReserveModel)
def refill_cash(
    request: RefillRequest,
    ledger: Ledger = Depends(get_ledger),
    actor: str = Depends(require_technician)
):
    """Add cash to the dispenser"""
    amount = parse_amount(request.amount)
    available = unwrap_or_raise(ledger.refill_cash(amount, actor=actor))
    return CashReserveModel.from_amount(available)


@router.get("/transactions", response_model=TransactionLogResponse)
def view_transactions(ledger: Ledger = Depends(get_ledger), actor: str = Depends(require_technician)):
    """Raw transaction log lines, oldest first"""
    return TransactionLogResponse(lines=unwrap_or_raise(ledger.read_log()))


@router.get("/transactions/verify")
def verify_transactions(
    ledger: Ledger = Depends(get_ledger),
    actor: str = Depends(require_technician)
) -> Dict[str, Any]:
    """Check the transaction log for malformed or out-of-order lines"""
    return unwrap_or_raise(ledger.verify_log())
