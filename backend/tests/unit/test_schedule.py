"""Unit tests for the vesting schedule math"""
import pytest

from vesting_engine.errors import InvalidSchedule
from vesting_engine.services.schedule import (
    Active,
    UNSTARTED,
    Unstarted,
    claimable_amount,
    validate_schedule,
    vested_amount,
)

START = 1000


class TestValidateSchedule:
    """Tests for schedule parameter validation"""

    def test_cliff_equal_to_duration_is_valid(self):
        validate_schedule(15, 15)

    def test_zero_cliff_and_duration_is_valid(self):
        validate_schedule(0, 0)

    def test_cliff_greater_than_duration(self):
        with pytest.raises(InvalidSchedule):
            validate_schedule(20, 15)

    def test_negative_cliff(self):
        with pytest.raises(InvalidSchedule):
            validate_schedule(-1, 15)

    def test_negative_duration(self):
        with pytest.raises(InvalidSchedule):
            validate_schedule(0, -15)


class TestScheduleState:
    """Tests for the tagged schedule state"""

    def test_unstarted(self):
        assert UNSTARTED.started is False
        assert isinstance(UNSTARTED, Unstarted)

    def test_active(self):
        schedule = Active(start_time=START, cliff_seconds=5, duration_seconds=15)
        assert schedule.started is True
        assert schedule.elapsed(START + 7) == 7

    def test_active_is_immutable(self):
        schedule = Active(start_time=START, cliff_seconds=5, duration_seconds=15)
        with pytest.raises(AttributeError):
            schedule.cliff_seconds = 0


class TestVestedAmount:
    """Tests for the vested-amount formula"""

    @pytest.fixture
    def schedule(self):
        return Active(start_time=START, cliff_seconds=5, duration_seconds=15)

    def test_not_started_vests_nothing(self):
        assert vested_amount(1000, UNSTARTED, START + 100) == 0

    def test_before_cliff(self, schedule):
        assert vested_amount(1000, schedule, START + 3) == 0

    def test_just_before_cliff(self, schedule):
        assert vested_amount(1000, schedule, START + 4) == 0

    def test_at_cliff_counts_from_start(self, schedule):
        """Vesting is measured from start_time, not from the end of the cliff"""
        assert vested_amount(1000, schedule, START + 5) == 333

    def test_linear_rounds_down(self, schedule):
        assert vested_amount(1000, schedule, START + 10) == 666

    def test_at_duration(self, schedule):
        assert vested_amount(1000, schedule, START + 15) == 1000

    def test_after_duration(self, schedule):
        assert vested_amount(1000, schedule, START + 10_000) == 1000

    def test_clock_before_start(self, schedule):
        assert vested_amount(1000, schedule, START - 50) == 0

    def test_zero_duration_vests_immediately(self):
        schedule = Active(start_time=START, cliff_seconds=0, duration_seconds=0)
        assert vested_amount(1000, schedule, START) == 1000

    def test_multiply_before_divide(self):
        """A small allocation over a long duration must not truncate to zero early"""
        schedule = Active(start_time=START, cliff_seconds=0, duration_seconds=3)
        assert vested_amount(10, schedule, START + 1) == 3
        assert vested_amount(10, schedule, START + 2) == 6

    def test_large_allocation_is_exact(self):
        schedule = Active(start_time=0, cliff_seconds=0, duration_seconds=7)
        allocation = 10 ** 27
        assert vested_amount(allocation, schedule, 3) == (allocation * 3) // 7

    def test_idempotent(self, schedule):
        results = {vested_amount(1000, schedule, START + 12) for _ in range(5)}
        assert results == {800}

    def test_monotonic_in_time(self, schedule):
        amounts = [vested_amount(997, schedule, START + t) for t in range(0, 20)]
        assert amounts == sorted(amounts)
        assert amounts[-1] == 997


class TestClaimableAmount:
    """Tests for vested-minus-claimed"""

    @pytest.fixture
    def schedule(self):
        return Active(start_time=START, cliff_seconds=5, duration_seconds=15)

    def test_nothing_claimed(self, schedule):
        assert claimable_amount(1000, 0, schedule, START + 10) == 666

    def test_partially_claimed(self, schedule):
        assert claimable_amount(1000, 666, schedule, START + 20) == 334

    def test_fully_claimed(self, schedule):
        assert claimable_amount(1000, 1000, schedule, START + 20) == 0

    def test_never_negative(self, schedule):
        assert claimable_amount(1000, 900, schedule, START + 10) == 0
