"""Vesting engine services"""
from .schedule import Active, Unstarted, ScheduleState, vested_amount, claimable_amount, validate_schedule
from .allocation import AllocationPolicy, BeneficiaryCategory, FixedAllocation, SupplyShareAllocation
from .ledger import SqlTokenLedger, TokenLedger
from .event_log import EventLog, EngineState
from .engine import VestingEngine, EngineSummary, bootstrap_engine

__all__ = [
    # Schedule math
    "Active",
    "Unstarted",
    "ScheduleState",
    "vested_amount",
    "claimable_amount",
    "validate_schedule",
    # Allocation
    "AllocationPolicy",
    "BeneficiaryCategory",
    "FixedAllocation",
    "SupplyShareAllocation",
    # Ledger
    "SqlTokenLedger",
    "TokenLedger",
    # Engine
    "EventLog",
    "EngineState",
    "VestingEngine",
    "EngineSummary",
    "bootstrap_engine",
]
