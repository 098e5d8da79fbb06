"""Event log for recording and replaying engine state changes."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_engine.models.event import EngineEvent, EventType

logger = structlog.get_logger()


@dataclass
class BeneficiaryState:
    """Replayed state of one beneficiary."""
    address: str
    category: int
    total_allocation: int
    claimed_amount: int = 0


@dataclass
class EngineState:
    """Complete engine state as of a point in time."""
    timestamp: Optional[int]
    balances: Dict[str, int] = field(default_factory=dict)  # address -> ledger balance
    beneficiaries: Dict[str, BeneficiaryState] = field(default_factory=dict)
    started: bool = False
    start_time: Optional[int] = None
    cliff_seconds: Optional[int] = None
    duration_seconds: Optional[int] = None
    total_supply: int = 0

    @property
    def total_allocated(self) -> int:
        return sum(b.total_allocation for b in self.beneficiaries.values())

    @property
    def total_claimed(self) -> int:
        return sum(b.claimed_amount for b in self.beneficiaries.values())


class EventLog:
    """Service for recording events and reconstructing state from them."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        event_type: EventType,
        timestamp: int,
        actor: Optional[str] = None,
        address: Optional[str] = None,
        counterparty: Optional[str] = None,
        amount: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> EngineEvent:
        """
        Append an event to the log.

        Args:
            event_type: The kind of state change
            timestamp: Engine clock reading (unix seconds)
            actor: Caller that triggered the change
            address: Primary address involved (sender, beneficiary)
            counterparty: Recipient for transfers
            amount: Tokens involved
            data: Additional type-specific data as JSON

        Returns:
            The created EngineEvent record
        """
        event = EngineEvent(
            event_type=event_type,
            timestamp=timestamp,
            actor=actor,
            address=address,
            counterparty=counterparty,
            amount=amount,
            data=data,
        )

        self.db.add(event)
        await self.db.flush()

        logger.debug(
            "Recorded event",
            event_id=event.id,
            event_type=event_type.value,
            address=address,
            amount=amount,
        )

        return event

    async def reconstruct(self, until: Optional[int] = None) -> EngineState:
        """
        Rebuild engine state by replaying events in order.

        Args:
            until: Only replay events with timestamp <= until (all when None)

        Returns:
            EngineState as of that time
        """
        query = select(EngineEvent)
        if until is not None:
            query = query.where(EngineEvent.timestamp <= until)
        result = await self.db.execute(query.order_by(EngineEvent.id))
        events = result.scalars().all()

        state = EngineState(timestamp=until)
        for event in events:
            self._apply_event(state, event)

        logger.info(
            "Reconstructed engine state",
            until=until,
            event_count=len(events),
            beneficiary_count=len(state.beneficiaries),
        )

        return state

    def _apply_event(self, state: EngineState, event: EngineEvent) -> None:
        """Apply a single event to the state."""
        match event.event_type:
            case EventType.MINT:
                if event.address and event.amount:
                    state.balances[event.address] = state.balances.get(event.address, 0) + event.amount
                    state.total_supply += event.amount

            case EventType.TRANSFER:
                if event.address and event.counterparty and event.amount:
                    state.balances[event.address] = state.balances.get(event.address, 0) - event.amount
                    state.balances[event.counterparty] = state.balances.get(event.counterparty, 0) + event.amount

            case EventType.BENEFICIARY_REGISTER:
                if event.address:
                    data = event.data or {}
                    state.beneficiaries[event.address] = BeneficiaryState(
                        address=event.address,
                        category=data.get("category", 0),
                        total_allocation=event.amount or 0,
                    )

            case EventType.SCHEDULE_ACTIVATE:
                data = event.data or {}
                state.started = True
                state.start_time = data.get("start_time", event.timestamp)
                state.cliff_seconds = data.get("cliff_seconds")
                state.duration_seconds = data.get("duration_seconds")

            case EventType.CLAIM:
                if event.address and event.amount and event.address in state.beneficiaries:
                    state.beneficiaries[event.address].claimed_amount += event.amount

    async def list_events(
        self,
        address: Optional[str] = None,
        event_types: Optional[List[EventType]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[EngineEvent]:
        """
        List events, newest first.

        Args:
            address: Only events where this address is the subject or counterparty
            event_types: Optional filter for specific event types
            limit: Maximum records to return
            offset: Records to skip
        """
        conditions = []
        if address is not None:
            conditions.append(
                or_(EngineEvent.address == address, EngineEvent.counterparty == address)
            )
        if event_types:
            conditions.append(EngineEvent.event_type.in_(event_types))

        query = select(EngineEvent)
        if conditions:
            query = query.where(and_(*conditions))
        query = query.order_by(EngineEvent.id.desc()).limit(limit).offset(offset)

        result = await self.db.execute(query)
        return list(result.scalars().all())
