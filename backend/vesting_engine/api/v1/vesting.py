"""Vesting API endpoints"""
from fastapi import APIRouter, Depends, Path
from typing import List

from vesting_engine.api.v1.deps import get_caller, get_engine
from vesting_engine.models.beneficiary import Beneficiary
from vesting_engine.schemas.vesting import (
    ActivateScheduleRequest,
    BeneficiaryResponse,
    ClaimResponse,
    EngineSummaryResponse,
    RegisterBeneficiaryRequest,
    ScheduleResponse,
    VestingStatusResponse,
)
from vesting_engine.services.allocation import BeneficiaryCategory
from vesting_engine.services.engine import VestingEngine
from vesting_engine.services import schedule as schedule_math

router = APIRouter()


async def _beneficiary_to_response(engine: VestingEngine, b: Beneficiary) -> BeneficiaryResponse:
    schedule = await engine.get_schedule()
    now = engine.clock()
    return BeneficiaryResponse(
        address=b.address,
        category=b.category,
        category_name=BeneficiaryCategory(b.category).name.lower(),
        total_allocation=b.total_allocation,
        claimed_amount=b.claimed_amount,
        vested_amount=schedule_math.vested_amount(b.total_allocation, schedule, now),
        claimable_amount=schedule_math.claimable_amount(b.total_allocation, b.claimed_amount, schedule, now),
        created_at=b.created_at,
    )


@router.post("/beneficiaries", response_model=BeneficiaryResponse, status_code=201)
async def register_beneficiary(
    request: RegisterBeneficiaryRequest,
    caller: str = Depends(get_caller),
    engine: VestingEngine = Depends(get_engine),
):
    """Register a beneficiary (manager only, before the schedule starts)"""
    beneficiary = await engine.register_beneficiary(caller, request.address, request.category)
    return await _beneficiary_to_response(engine, beneficiary)


@router.get("/beneficiaries", response_model=List[BeneficiaryResponse])
async def list_beneficiaries(engine: VestingEngine = Depends(get_engine)):
    """List all registered beneficiaries with their current vested amounts"""
    beneficiaries = await engine.list_beneficiaries()
    return [await _beneficiary_to_response(engine, b) for b in beneficiaries]


@router.get("/beneficiaries/{address}", response_model=BeneficiaryResponse)
async def get_beneficiary(address: str = Path(...), engine: VestingEngine = Depends(get_engine)):
    """Get one beneficiary"""
    beneficiary = await engine.get_beneficiary(address)
    return await _beneficiary_to_response(engine, beneficiary)


@router.post("/schedule", response_model=ScheduleResponse)
async def activate_schedule(
    request: ActivateScheduleRequest,
    caller: str = Depends(get_caller),
    engine: VestingEngine = Depends(get_engine),
):
    """Activate the vesting schedule (manager only, once)"""
    active = await engine.activate_schedule(caller, request.cliff_seconds, request.duration_seconds)
    return ScheduleResponse(
        started=True,
        start_time=active.start_time,
        cliff_seconds=active.cliff_seconds,
        duration_seconds=active.duration_seconds,
        elapsed_seconds=0,
    )


@router.get("/schedule", response_model=ScheduleResponse)
async def get_schedule(engine: VestingEngine = Depends(get_engine)):
    schedule = await engine.get_schedule()
    if not isinstance(schedule, schedule_math.Active):
        return ScheduleResponse(started=False)
    return ScheduleResponse(
        started=True,
        start_time=schedule.start_time,
        cliff_seconds=schedule.cliff_seconds,
        duration_seconds=schedule.duration_seconds,
        elapsed_seconds=schedule.elapsed(engine.clock()),
    )


@router.get("/status", response_model=VestingStatusResponse)
async def vesting_status(engine: VestingEngine = Depends(get_engine)):
    """Whether the vesting schedule has started"""
    return VestingStatusResponse(started=await engine.is_vesting_started())


@router.post("/claim", response_model=ClaimResponse)
async def claim_tokens(
    caller: str = Depends(get_caller),
    engine: VestingEngine = Depends(get_engine),
):
    """Claim the caller's vested, unclaimed tokens"""
    amount = await engine.claim_tokens(caller)
    beneficiary = await engine.get_beneficiary(caller)
    return ClaimResponse(
        address=caller,
        amount=amount,
        claimed_amount=beneficiary.claimed_amount,
        total_allocation=beneficiary.total_allocation,
        balance=await engine.ledger.balance_of(caller),
    )


@router.get("/summary", response_model=EngineSummaryResponse)
async def engine_summary(engine: VestingEngine = Depends(get_engine)):
    summary = await engine.summary()
    return EngineSummaryResponse(
        started=summary.started,
        beneficiary_count=summary.beneficiary_count,
        total_allocated=summary.total_allocated,
        total_claimed=summary.total_claimed,
        pool_balance=summary.pool_balance,
    )
