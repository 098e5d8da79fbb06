"""Event log API endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from vesting_engine.models.database import get_db
from vesting_engine.models.event import EventType
from vesting_engine.schemas.event import EventResponse
from vesting_engine.services.event_log import EventLog

router = APIRouter()


@router.get("", response_model=List[EventResponse])
async def list_events(
    address: Optional[str] = Query(None),
    event_type: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """List engine events, newest first"""
    event_types = None
    if event_type:
        try:
            event_types = [EventType(event_type)]
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid event type: {event_type}")

    events = await EventLog(db).list_events(
        address=address, event_types=event_types, limit=limit, offset=offset
    )
    return [
        EventResponse(
            id=e.id,
            event_type=e.event_type.value,
            timestamp=e.timestamp,
            actor=e.actor,
            address=e.address,
            counterparty=e.counterparty,
            amount=e.amount,
            data=e.data,
            created_at=e.created_at,
        )
        for e in events
    ]
