"""Pytest configuration and fixtures for the vesting engine tests"""
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Keep the application's own engine off any configured production database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from vesting_engine.main import app
from vesting_engine.config import Settings, AllocationRuleConfig
from vesting_engine.models.database import Base, get_db
from vesting_engine.api.v1.deps import get_clock, get_policy
from vesting_engine.services.allocation import (
    AllocationPolicy,
    BeneficiaryCategory,
    FixedAllocation,
    SupplyShareAllocation,
)
from vesting_engine.services.engine import VestingEngine, bootstrap_engine

MANAGER = "manager"
POOL = "vesting-engine"
TOTAL_SUPPLY = 1_000_000
START_TIME = 1_704_067_200  # 2024-01-01

SEED_WALLET = "Lp5Q3vTs123456789012345678901234567890123456"
TEAM_WALLET = "Jm2N9zWr123456789012345678901234567890123456"
ADVISOR_WALLET = "Hk4M8xYq123456789012345678901234567890123456"


class FakeClock:
    """Controllable engine clock"""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def settings() -> Settings:
    return Settings(
        manager_address=MANAGER,
        engine_address=POOL,
        token_total_supply=TOTAL_SUPPLY,
        allocation_rules={
            "seed": AllocationRuleConfig(kind="fixed", amount=1000),
            "team": AllocationRuleConfig(kind="fixed", amount=2000),
            "advisor": AllocationRuleConfig(kind="supply_share", basis_points=50),
        },
    )


@pytest.fixture
def policy() -> AllocationPolicy:
    return AllocationPolicy({
        BeneficiaryCategory.SEED: FixedAllocation(1000),
        BeneficiaryCategory.TEAM: FixedAllocation(2000),
        BeneficiaryCategory.ADVISOR: SupplyShareAllocation(50),  # 5000 of 1,000,000
    })


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture(scope="function")
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test"""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture
async def bootstrapped(db_session, settings) -> AsyncSession:
    """Database with the token supply minted to the manager"""
    await bootstrap_engine(db_session, settings)
    return db_session


@pytest_asyncio.fixture
async def engine(bootstrapped, policy, clock, settings) -> VestingEngine:
    return VestingEngine(bootstrapped, policy=policy, clock=clock, settings=settings)


@pytest_asyncio.fixture
async def funded_engine(engine) -> VestingEngine:
    """Engine with its pool funded and one beneficiary per category"""
    await engine.fund_engine(MANAGER, 100_000)
    await engine.register_beneficiary(MANAGER, SEED_WALLET, 0)
    await engine.register_beneficiary(MANAGER, TEAM_WALLET, 1)
    await engine.register_beneficiary(MANAGER, ADVISOR_WALLET, 2)
    return engine


@pytest_asyncio.fixture(scope="function")
async def client(bootstrapped, policy, clock) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client"""

    async def override_get_db():
        yield bootstrapped

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_policy] = lambda: policy

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
