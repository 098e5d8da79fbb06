"""Vesting schemas"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, Union


class RegisterBeneficiaryRequest(BaseModel):
    """Register a beneficiary before the schedule starts.

    `category` accepts the integer tag (0=seed, 1=team, 2=advisor) or the name.
    """
    address: str = Field(..., min_length=1, max_length=64)
    category: Union[int, str]


class ActivateScheduleRequest(BaseModel):
    cliff_seconds: int
    duration_seconds: int


class BeneficiaryResponse(BaseModel):
    address: str
    category: int
    category_name: str
    total_allocation: int
    claimed_amount: int
    vested_amount: int
    claimable_amount: int
    created_at: Optional[datetime] = None


class ScheduleResponse(BaseModel):
    started: bool
    start_time: Optional[int] = None  # Unix timestamp
    cliff_seconds: Optional[int] = None
    duration_seconds: Optional[int] = None
    elapsed_seconds: Optional[int] = None


class VestingStatusResponse(BaseModel):
    started: bool


class ClaimResponse(BaseModel):
    address: str
    amount: int
    claimed_amount: int
    total_allocation: int
    balance: int


class EngineSummaryResponse(BaseModel):
    started: bool
    beneficiary_count: int
    total_allocated: int
    total_claimed: int
    pool_balance: int
