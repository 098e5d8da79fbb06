"""Background scheduler that settles claims on behalf of beneficiaries."""
import asyncio
from typing import Callable, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vesting_engine.errors import NothingToClaim, VestingError
from vesting_engine.models.beneficiary import Beneficiary
from vesting_engine.services.allocation import AllocationPolicy
from vesting_engine.services.engine import VestingEngine

logger = structlog.get_logger()


class AutoClaimScheduler:
    """
    Periodically claims vested tokens for every beneficiary.

    Claims are settled exactly as if the beneficiary had called claim_tokens;
    this only saves them the round trip.
    """

    def __init__(
        self,
        interval_seconds: int = 60,
        session_factory: Optional[async_sessionmaker] = None,
        policy: Optional[AllocationPolicy] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize the auto-claim scheduler.

        Args:
            interval_seconds: How often to settle claims (default: 60s)
            session_factory: Session factory (defaults to the application's)
            policy: Allocation policy passed through to the engine
            clock: Engine clock override
        """
        self.interval_seconds = interval_seconds
        self._session_factory = session_factory
        self._policy = policy
        self._clock = clock
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def session_factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            from vesting_engine.models.database import async_session_factory
            self._session_factory = async_session_factory
        return self._session_factory

    async def start(self):
        """Start the background scheduler."""
        if self._running:
            logger.warning("Auto-claim scheduler already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Auto-claim scheduler started", interval_seconds=self.interval_seconds)

    async def stop(self):
        """Stop the background scheduler."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("Auto-claim scheduler stopped")

    async def _run_loop(self):
        """Main scheduler loop."""
        while self._running:
            try:
                await self.settle_all()
            except Exception as e:
                logger.error("Error in auto-claim scheduler", error=str(e))

            await asyncio.sleep(self.interval_seconds)

    async def settle_all(self) -> int:
        """
        Claim for every beneficiary with something vested and unclaimed.

        Returns:
            Total amount transferred in this pass
        """
        async with self.session_factory() as db:
            engine = VestingEngine(db, policy=self._policy, clock=self._clock)
            if not await engine.is_vesting_started():
                return 0

            result = await db.execute(select(Beneficiary.address).order_by(Beneficiary.id))
            addresses = list(result.scalars().all())

            total = 0
            settled = 0
            for address in addresses:
                try:
                    total += await self._settle_one(engine, address)
                    settled += 1
                except NothingToClaim:
                    continue
                except VestingError as e:
                    logger.error("Auto-claim failed", address=address, error=e.code, detail=e.message)

        if settled:
            logger.info("Auto-claim pass complete", settled=settled, total_amount=total)
        return total

    async def _settle_one(self, engine: VestingEngine, address: str) -> int:
        if await engine.claimable_amount(address) == 0:
            raise NothingToClaim(address)
        return await engine.claim_tokens(address)


# Singleton instance
_scheduler: Optional[AutoClaimScheduler] = None


def get_auto_claim_scheduler(interval_seconds: int = 60) -> AutoClaimScheduler:
    """Get or create the singleton scheduler."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AutoClaimScheduler(interval_seconds=interval_seconds)
    return _scheduler


async def start_auto_claim_scheduler(interval_seconds: int = 60):
    """Start the auto-claim scheduler."""
    scheduler = get_auto_claim_scheduler(interval_seconds)
    await scheduler.start()


async def stop_auto_claim_scheduler():
    """Stop the auto-claim scheduler."""
    global _scheduler
    if _scheduler:
        await _scheduler.stop()
        _scheduler = None
