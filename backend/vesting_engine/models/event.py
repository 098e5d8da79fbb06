"""Engine event log model."""
import enum
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, BigInteger, DateTime, JSON, Index, Enum as SQLEnum
)

from vesting_engine.models.database import Base


class EventType(str, enum.Enum):
    """All state-changing events recorded by the engine."""
    # Ledger
    MINT = "mint"
    TRANSFER = "transfer"

    # Registry
    BENEFICIARY_REGISTER = "beneficiary_register"

    # Schedule
    SCHEDULE_ACTIVATE = "schedule_activate"

    # Settlement
    CLAIM = "claim"


class EngineEvent(Base):
    """
    Append-only record of every state change.

    Engine state can be rebuilt by replaying events in id order.
    """
    __tablename__ = "engine_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_type = Column(SQLEnum(EventType), nullable=False, index=True)
    timestamp = Column(BigInteger, nullable=False, index=True)  # engine clock, unix seconds
    created_at = Column(DateTime, default=datetime.utcnow)

    actor = Column(String(64), nullable=True)  # Caller that triggered the event
    address = Column(String(64), nullable=True, index=True)  # Primary address involved
    counterparty = Column(String(64), nullable=True, index=True)  # Recipient for transfers
    amount = Column(BigInteger, nullable=True)

    data = Column(JSON, nullable=True)

    __table_args__ = (
        Index('ix_engine_events_address_ts', 'address', 'timestamp'),
        Index('ix_engine_events_type_ts', 'event_type', 'timestamp'),
    )

    def __repr__(self):
        return f"<EngineEvent(id={self.id}, type={self.event_type}, address={self.address}, amount={self.amount})>"
