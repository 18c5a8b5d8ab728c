"""
Pydantic schemas for API requests and responses
"""

from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field

from ..accounts import Account
from ..currency import format_amount


class CustomerCredentials(BaseModel):
    account_id: str
    pin: str


class AmountRequest(CustomerCredentials):
    amount: str = Field(..., description="Amount as entered, e.g. '500' or '1,250.50'")


class TransferRequest(AmountRequest):
    to_account_id: str


class AddAccountRequest(BaseModel):
    account_id: str
    pin: str
    name: str
    initial_balance: str = Field("0.00", description="Opening balance as entered")


class RefillRequest(BaseModel):
    amount: str = Field(..., description="Cash added to the dispenser, as entered")


class AccountModel(BaseModel):
    account_id: str
    name: str
    balance: str = Field(..., description="Decimal balance as string")

    @classmethod
    def from_account(cls, account: Account) -> 'AccountModel':
        return cls(account_id=account.id, name=account.name, balance=format_amount(account.balance))


class OperationResponse(BaseModel):
    message: str
    account: AccountModel


class CashReserveModel(BaseModel):
    available: str = Field(..., description="Decimal amount as string")

    @classmethod
    def from_amount(cls, amount: Decimal) -> 'CashReserveModel':
        return cls(available=format_amount(amount))


class AccountListResponse(BaseModel):
    cash_reserve: CashReserveModel
    accounts: List[AccountModel]


class TransactionLogResponse(BaseModel):
    lines: List[str]
