"""Vesting engine: beneficiary registry, schedule activation and claim settlement."""
import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, TypeVar, Union

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_engine.config import Settings, get_settings
from vesting_engine.errors import (
    AlreadyActivated,
    AlreadyRegistered,
    AllocationExceedsSupply,
    NotStarted,
    NothingToClaim,
    TransferFailed,
    Unauthorized,
    UnknownBeneficiary,
)
from vesting_engine.models.beneficiary import Beneficiary, ScheduleRecord
from vesting_engine.models.event import EventType
from vesting_engine.services.allocation import AllocationPolicy, BeneficiaryCategory, parse_category
from vesting_engine.services.event_log import EventLog
from vesting_engine.services.ledger import SqlTokenLedger, TokenLedger, current_timestamp
from vesting_engine.services import schedule as schedule_math

logger = structlog.get_logger()

T = TypeVar("T")

# Operations run one at a time: a claim reads and writes per-beneficiary
# state with no other locking, so the commit must happen before the next
# operation starts.
_operation_lock = asyncio.Lock()


@dataclass
class EngineSummary:
    """Aggregate view of the engine."""
    started: bool
    beneficiary_count: int
    total_allocated: int
    total_claimed: int
    pool_balance: int


class VestingEngine:
    """
    Registers beneficiaries, activates the single global schedule and settles claims.

    Every mutating operation is all-or-nothing: it runs under a process-wide
    lock and commits on success; any failure rolls the session back.
    """

    def __init__(
        self,
        db: AsyncSession,
        policy: Optional[AllocationPolicy] = None,
        clock: Optional[Callable[[], int]] = None,
        settings: Optional[Settings] = None,
        ledger: Optional[TokenLedger] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.policy = policy or AllocationPolicy.from_config(self.settings.allocation_rules)
        self.clock = clock or current_timestamp
        self.ledger = ledger or SqlTokenLedger(db, clock=self.clock)
        self.events = EventLog(db)

    @property
    def manager(self) -> str:
        return self.settings.manager_address

    @property
    def pool_address(self) -> str:
        return self.settings.engine_address

    async def _serialized(self, operation: Callable[[], Awaitable[T]]) -> T:
        async with _operation_lock:
            try:
                result = await operation()
                await self.db.commit()
                return result
            except Exception:
                await self.db.rollback()
                raise

    def _require_manager(self, caller: str, action: str) -> None:
        if caller != self.manager:
            logger.warning("Unauthorized call", caller=caller, action=action)
            raise Unauthorized(f"Only the manager may {action}")

    async def _load_schedule(self) -> ScheduleRecord:
        record = await self.db.get(ScheduleRecord, ScheduleRecord.SINGLETON_ID)
        if record is None:
            record = ScheduleRecord(id=ScheduleRecord.SINGLETON_ID, started=False)
            self.db.add(record)
            await self.db.flush()
        return record

    async def get_schedule(self) -> schedule_math.ScheduleState:
        """Current schedule as an immutable value."""
        record = await self.db.get(ScheduleRecord, ScheduleRecord.SINGLETON_ID)
        if record is None or not record.started:
            return schedule_math.UNSTARTED
        return schedule_math.Active(
            start_time=record.start_time,
            cliff_seconds=record.cliff_seconds,
            duration_seconds=record.duration_seconds,
        )

    async def is_vesting_started(self) -> bool:
        return (await self.get_schedule()).started

    async def get_beneficiary(self, address: str, for_update: bool = False) -> Beneficiary:
        query = select(Beneficiary).where(Beneficiary.address == address)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        beneficiary = result.scalar_one_or_none()
        if beneficiary is None:
            raise UnknownBeneficiary(f"{address} is not a registered beneficiary")
        return beneficiary

    async def list_beneficiaries(self) -> List[Beneficiary]:
        result = await self.db.execute(select(Beneficiary).order_by(Beneficiary.id))
        return list(result.scalars().all())

    async def vested_amount(self, address: str, now: Optional[int] = None) -> int:
        beneficiary = await self.get_beneficiary(address)
        schedule = await self.get_schedule()
        return schedule_math.vested_amount(
            beneficiary.total_allocation, schedule, self.clock() if now is None else now
        )

    async def claimable_amount(self, address: str, now: Optional[int] = None) -> int:
        beneficiary = await self.get_beneficiary(address)
        schedule = await self.get_schedule()
        return schedule_math.claimable_amount(
            beneficiary.total_allocation,
            beneficiary.claimed_amount,
            schedule,
            self.clock() if now is None else now,
        )

    async def summary(self) -> EngineSummary:
        result = await self.db.execute(
            select(
                func.count(Beneficiary.id),
                func.coalesce(func.sum(Beneficiary.total_allocation), 0),
                func.coalesce(func.sum(Beneficiary.claimed_amount), 0),
            )
        )
        count, allocated, claimed = result.one()
        return EngineSummary(
            started=await self.is_vesting_started(),
            beneficiary_count=count,
            total_allocated=int(allocated),
            total_claimed=int(claimed),
            pool_balance=await self.ledger.balance_of(self.pool_address),
        )

    async def register_beneficiary(
        self,
        caller: str,
        address: str,
        category: Union[int, str, BeneficiaryCategory],
    ) -> Beneficiary:
        """Register `address` under `category` (manager only, before activation)."""

        async def operation() -> Beneficiary:
            self._require_manager(caller, "register beneficiaries")
            record = await self._load_schedule()
            if record.started:
                raise AlreadyActivated("Beneficiaries cannot be registered after the schedule has started")

            resolved = parse_category(category)
            existing = await self.db.execute(
                select(Beneficiary.id).where(Beneficiary.address == address)
            )
            if existing.scalar_one_or_none() is not None:
                raise AlreadyRegistered(f"{address} is already registered")

            total_supply = await self.ledger.total_supply()
            allocation = self.policy.allocation_for(resolved, total_supply)

            allocated = await self.db.execute(
                select(func.coalesce(func.sum(Beneficiary.total_allocation), 0))
            )
            if int(allocated.scalar_one()) + allocation > total_supply:
                raise AllocationExceedsSupply(
                    f"Allocating {allocation} would exceed total supply {total_supply}"
                )

            beneficiary = Beneficiary(
                address=address,
                category=int(resolved),
                total_allocation=allocation,
                claimed_amount=0,
                registered_by=caller,
            )
            self.db.add(beneficiary)
            await self.db.flush()

            await self.events.record(
                EventType.BENEFICIARY_REGISTER,
                timestamp=self.clock(),
                actor=caller,
                address=address,
                amount=allocation,
                data={"category": int(resolved), "category_name": resolved.name.lower()},
            )

            logger.info(
                "Beneficiary registered",
                address=address,
                category=resolved.name.lower(),
                total_allocation=allocation,
            )
            return beneficiary

        return await self._serialized(operation)

    async def activate_schedule(self, caller: str, cliff_seconds: int, duration_seconds: int) -> schedule_math.Active:
        """Start the clock. One-shot: a started schedule never changes again."""

        async def operation() -> schedule_math.Active:
            self._require_manager(caller, "activate the schedule")
            record = await self._load_schedule()
            if record.started:
                raise AlreadyActivated("Vesting schedule has already been activated")
            schedule_math.validate_schedule(cliff_seconds, duration_seconds)

            now = self.clock()
            record.started = True
            record.start_time = now
            record.cliff_seconds = cliff_seconds
            record.duration_seconds = duration_seconds
            record.activated_by = caller
            record.activated_at = datetime.utcnow()
            await self.db.flush()

            await self.events.record(
                EventType.SCHEDULE_ACTIVATE,
                timestamp=now,
                actor=caller,
                data={
                    "start_time": now,
                    "cliff_seconds": cliff_seconds,
                    "duration_seconds": duration_seconds,
                },
            )

            logger.info(
                "Vesting schedule activated",
                start_time=now,
                cliff_seconds=cliff_seconds,
                duration_seconds=duration_seconds,
            )
            return schedule_math.Active(
                start_time=now,
                cliff_seconds=cliff_seconds,
                duration_seconds=duration_seconds,
            )

        return await self._serialized(operation)

    async def claim_tokens(self, caller: str) -> int:
        """Settle the caller's vested-but-unclaimed tokens.

        claimed_amount is updated before the ledger transfer, which is the
        last action of the operation. Returns the amount transferred.
        """

        async def operation() -> int:
            schedule = await self.get_schedule()
            if not schedule.started:
                raise NotStarted("Vesting schedule has not started")

            beneficiary = await self.get_beneficiary(caller, for_update=True)
            now = self.clock()
            payable = schedule_math.claimable_amount(
                beneficiary.total_allocation, beneficiary.claimed_amount, schedule, now
            )
            if payable == 0:
                raise NothingToClaim(f"Nothing vested for {caller} beyond {beneficiary.claimed_amount}")

            beneficiary.claimed_amount += payable
            await self.db.flush()

            await self.events.record(
                EventType.CLAIM,
                timestamp=now,
                actor=caller,
                address=caller,
                amount=payable,
                data={
                    "claimed_amount": beneficiary.claimed_amount,
                    "total_allocation": beneficiary.total_allocation,
                    "elapsed": schedule.elapsed(now),
                },
            )

            if not await self.ledger.transfer(self.pool_address, caller, payable):
                raise TransferFailed(f"Engine pool could not cover {payable} for {caller}")

            logger.info(
                "Tokens claimed",
                address=caller,
                amount=payable,
                claimed_amount=beneficiary.claimed_amount,
                total_allocation=beneficiary.total_allocation,
            )
            return payable

        return await self._serialized(operation)

    async def fund_engine(self, caller: str, amount: int) -> int:
        """Move tokens from the manager into the engine pool. Returns the new pool balance."""

        async def operation() -> int:
            self._require_manager(caller, "fund the engine")
            if not await self.ledger.transfer(caller, self.pool_address, amount):
                raise TransferFailed(f"Manager could not transfer {amount} to the engine pool")
            balance = await self.ledger.balance_of(self.pool_address)
            logger.info("Engine funded", amount=amount, pool_balance=balance)
            return balance

        return await self._serialized(operation)


async def bootstrap_engine(db: AsyncSession, settings: Optional[Settings] = None) -> bool:
    """Mint the token supply to the manager and create the unstarted schedule.

    Safe to call on every startup; returns True only on first run.
    """
    settings = settings or get_settings()
    ledger = SqlTokenLedger(db)
    minted = await ledger.bootstrap(
        name=settings.token_name,
        symbol=settings.token_symbol,
        total_supply=settings.token_total_supply,
        holder=settings.manager_address,
    )
    if await db.get(ScheduleRecord, ScheduleRecord.SINGLETON_ID) is None:
        db.add(ScheduleRecord(id=ScheduleRecord.SINGLETON_ID, started=False))
    await db.commit()
    return minted
