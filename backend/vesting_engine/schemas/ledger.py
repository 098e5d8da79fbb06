"""Token ledger schemas"""
from pydantic import BaseModel


class BalanceResponse(BaseModel):
    address: str
    balance: int


class SupplyResponse(BaseModel):
    name: str
    symbol: str
    total_supply: int


class FundEngineRequest(BaseModel):
    amount: int


class FundEngineResponse(BaseModel):
    amount: int
    pool_balance: int
