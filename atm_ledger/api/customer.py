"""
Customer endpoints

Every request carries the account id and pin; the ledger checks them before
the operation runs.
"""

from fastapi import APIRouter, Depends

from ..ledger import Ledger
from .dependencies import get_ledger, parse_amount, unwrap_or_raise
from .schemas import (
    AccountModel, AmountRequest, CustomerCredentials, OperationResponse, TransferRequest
)


router = APIRouter()


def _authenticate(ledger: Ledger, credentials: CustomerCredentials):
    return unwrap_or_raise(ledger.authenticate(credentials.account_id.strip(), credentials.pin.strip()))


@router.post("/login", response_model=AccountModel)
def login(request: CustomerCredentials, ledger: Ledger = Depends(get_ledger)):
    """Check credentials and return the current balance"""
    account = _authenticate(ledger, request)
    return AccountModel.from_account(account)


@router.post("/withdraw", response_model=OperationResponse)
def withdraw(request: AmountRequest, ledger: Ledger = Depends(get_ledger)):
    """Withdraw cash from the dispenser"""
    amount = parse_amount(request.amount)
    account = _authenticate(ledger, request)
    result = ledger.withdraw(account.id, amount)
    updated = unwrap_or_raise(result)
    return OperationResponse(message=result.message, account=AccountModel.from_account(updated))


@router.post("/deposit", response_model=OperationResponse)
def deposit(request: AmountRequest, ledger: Ledger = Depends(get_ledger)):
    """Deposit into the account"""
    amount = parse_amount(request.amount)
    account = _authenticate(ledger, request)
    result = ledger.deposit(account.id, amount)
    updated = unwrap_or_raise(result)
    return OperationResponse(message=result.message, account=AccountModel.from_account(updated))


@router.post("/transfer", response_model=OperationResponse)
def transfer(request: TransferRequest, ledger: Ledger = Depends(get_ledger)):
    """Transfer to another account"""
    amount = parse_amount(request.amount)
    account = _authenticate(ledger, request)
    result = ledger.transfer(account.id, request.to_account_id.strip(), amount)
    updated = unwrap_or_raise(result)
    return OperationResponse(message=result.message, account=AccountModel.from_account(updated))
