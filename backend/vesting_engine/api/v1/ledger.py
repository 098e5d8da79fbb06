"""Token ledger API endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Path

from vesting_engine.api.v1.deps import get_caller, get_engine
from vesting_engine.models.ledger import TokenSupply
from vesting_engine.schemas.ledger import (
    BalanceResponse,
    FundEngineRequest,
    FundEngineResponse,
    SupplyResponse,
)
from vesting_engine.services.engine import VestingEngine

router = APIRouter()


@router.get("/balance/{address}", response_model=BalanceResponse)
async def get_balance(address: str = Path(...), engine: VestingEngine = Depends(get_engine)):
    return BalanceResponse(address=address, balance=await engine.ledger.balance_of(address))


@router.get("/supply", response_model=SupplyResponse)
async def get_supply(engine: VestingEngine = Depends(get_engine)):
    """Token metadata and total supply"""
    supply = await engine.db.get(TokenSupply, TokenSupply.SINGLETON_ID)
    if not supply:
        raise HTTPException(status_code=404, detail="Token supply has not been minted")
    return SupplyResponse(name=supply.name, symbol=supply.symbol, total_supply=supply.total_supply)


@router.post("/fund", response_model=FundEngineResponse)
async def fund_engine(
    request: FundEngineRequest,
    caller: str = Depends(get_caller),
    engine: VestingEngine = Depends(get_engine),
):
    """Transfer tokens from the manager into the engine pool (manager only)"""
    pool_balance = await engine.fund_engine(caller, request.amount)
    return FundEngineResponse(amount=request.amount, pool_balance=pool_balance)
