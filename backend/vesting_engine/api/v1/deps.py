"""Shared API dependencies"""
from typing import Callable

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_engine.config import get_settings
from vesting_engine.models.database import get_db
from vesting_engine.services.allocation import AllocationPolicy
from vesting_engine.services.engine import VestingEngine
from vesting_engine.services.ledger import current_timestamp


def get_caller(x_caller_address: str = Header(..., min_length=1)) -> str:
    """Identity of the caller, taken from the X-Caller-Address header"""
    return x_caller_address


def get_clock() -> Callable[[], int]:
    return current_timestamp


def get_policy() -> AllocationPolicy:
    return AllocationPolicy.from_config(get_settings().allocation_rules)


async def get_engine(
    db: AsyncSession = Depends(get_db),
    clock: Callable[[], int] = Depends(get_clock),
    policy: AllocationPolicy = Depends(get_policy),
) -> VestingEngine:
    return VestingEngine(db, policy=policy, clock=clock)
