"""Event log schemas"""
from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, Optional


class EventResponse(BaseModel):
    id: int
    event_type: str
    timestamp: int
    actor: Optional[str] = None
    address: Optional[str] = None
    counterparty: Optional[str] = None
    amount: Optional[int] = None
    data: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
