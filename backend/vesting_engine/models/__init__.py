"""Database models"""
from vesting_engine.models.database import Base, get_db
from vesting_engine.models.beneficiary import Beneficiary, ScheduleRecord
from vesting_engine.models.ledger import TokenAccount, TokenSupply
from vesting_engine.models.event import EngineEvent, EventType

__all__ = [
    "Base",
    "get_db",
    "Beneficiary",
    "ScheduleRecord",
    "TokenAccount",
    "TokenSupply",
    "EngineEvent",
    "EventType",
]
