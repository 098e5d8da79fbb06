"""Vesting schedule state and the vested-amount formula.

Everything here is pure: the schedule is passed in explicitly and nothing is
mutated, so repeated calls with the same inputs give the same result.
"""
from dataclasses import dataclass
from typing import Union

from vesting_engine.errors import InvalidSchedule


@dataclass(frozen=True)
class Unstarted:
    """Schedule not yet activated by the manager."""
    started = False


@dataclass(frozen=True)
class Active:
    """Activated schedule. All durations are in seconds."""
    start_time: int
    cliff_seconds: int
    duration_seconds: int

    started = True

    def elapsed(self, now: int) -> int:
        return now - self.start_time


ScheduleState = Union[Unstarted, Active]

UNSTARTED = Unstarted()


def validate_schedule(cliff_seconds: int, duration_seconds: int) -> None:
    """Raise InvalidSchedule unless 0 <= cliff <= duration."""
    if cliff_seconds < 0:
        raise InvalidSchedule("Cliff duration cannot be negative")
    if duration_seconds < 0:
        raise InvalidSchedule("Total duration cannot be negative")
    if cliff_seconds > duration_seconds:
        raise InvalidSchedule("Cliff cannot exceed total duration")


def vested_amount(total_allocation: int, schedule: ScheduleState, now: int) -> int:
    """Calculate the amount vested at `now`.

    Vesting is linear from start_time; the cliff only gates release. The
    product is taken before the division and floored, so rounding never
    favours the beneficiary.
    """
    if not isinstance(schedule, Active):
        return 0

    elapsed = schedule.elapsed(now)
    if elapsed < schedule.cliff_seconds:
        return 0
    if elapsed >= schedule.duration_seconds:
        return total_allocation

    return (total_allocation * elapsed) // schedule.duration_seconds


def claimable_amount(total_allocation: int, claimed_amount: int, schedule: ScheduleState, now: int) -> int:
    """Vested but not yet claimed amount (never negative)."""
    return max(0, vested_amount(total_allocation, schedule, now) - claimed_amount)
