"""Beneficiary registry and schedule models"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, BigInteger, Boolean, DateTime

from vesting_engine.models.database import Base


class Beneficiary(Base):
    """A registered recipient of a vesting allocation.

    `category` and `total_allocation` are fixed at registration. Only
    `claimed_amount` changes afterwards, and only through claim settlement.
    """
    __tablename__ = "beneficiaries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String(64), nullable=False, unique=True, index=True)
    category = Column(Integer, nullable=False)
    total_allocation = Column(BigInteger, nullable=False)
    claimed_amount = Column(BigInteger, nullable=False, default=0)
    registered_by = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Beneficiary {self.address[:8]}... ({self.claimed_amount}/{self.total_allocation})>"


class ScheduleRecord(Base):
    """The single global vesting schedule (row id=1).

    Starts with started=False; activation sets the timing fields once.
    """
    __tablename__ = "vesting_schedule"

    SINGLETON_ID = 1

    id = Column(Integer, primary_key=True)
    started = Column(Boolean, nullable=False, default=False)
    start_time = Column(BigInteger, nullable=True)  # unix seconds
    cliff_seconds = Column(BigInteger, nullable=True)
    duration_seconds = Column(BigInteger, nullable=True)
    activated_by = Column(String(64), nullable=True)
    activated_at = Column(DateTime, nullable=True)

    def __repr__(self):
        if not self.started:
            return "<ScheduleRecord not started>"
        return f"<ScheduleRecord start={self.start_time} cliff={self.cliff_seconds} duration={self.duration_seconds}>"
