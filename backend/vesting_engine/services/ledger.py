"""Token ledger collaborator.

The engine only needs balance lookup and transfers from the ledger. The SQL
implementation here shares the engine's session so a claim's bookkeeping and
its transfer commit or roll back together.
"""
import time
from typing import Callable, Optional, Protocol

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_engine.models.event import EventType
from vesting_engine.models.ledger import TokenAccount, TokenSupply
from vesting_engine.services.event_log import EventLog

logger = structlog.get_logger()


def current_timestamp() -> int:
    return int(time.time())


class TokenLedger(Protocol):
    async def balance_of(self, address: str) -> int: ...

    async def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    async def total_supply(self) -> int: ...


class SqlTokenLedger:
    """Fixed-supply ledger stored in the token_accounts table."""

    def __init__(self, db: AsyncSession, clock: Optional[Callable[[], int]] = None):
        self.db = db
        self.clock = clock or current_timestamp
        self.events = EventLog(db)

    async def _get_account(self, address: str, for_update: bool = False) -> Optional[TokenAccount]:
        query = select(TokenAccount).where(TokenAccount.address == address)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def balance_of(self, address: str) -> int:
        account = await self._get_account(address)
        return account.balance if account else 0

    async def total_supply(self) -> int:
        supply = await self.db.get(TokenSupply, TokenSupply.SINGLETON_ID)
        return supply.total_supply if supply else 0

    async def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move `amount` from sender to recipient.

        Returns False, leaving both balances untouched, when the amount is
        not positive or the sender cannot cover it.
        """
        if amount <= 0:
            return False

        source = await self._get_account(sender, for_update=True)
        if source is None or source.balance < amount:
            logger.warning(
                "Transfer rejected: insufficient balance",
                sender=sender,
                recipient=recipient,
                amount=amount,
                balance=source.balance if source else 0,
            )
            return False

        target = await self._get_account(recipient, for_update=True)
        if target is None:
            target = TokenAccount(address=recipient, balance=0)
            self.db.add(target)

        source.balance -= amount
        target.balance += amount
        await self.db.flush()

        await self.events.record(
            EventType.TRANSFER,
            timestamp=self.clock(),
            actor=sender,
            address=sender,
            counterparty=recipient,
            amount=amount,
        )
        return True

    async def bootstrap(self, name: str, symbol: str, total_supply: int, holder: str) -> bool:
        """Mint the whole fixed supply to `holder` once.

        Returns True when the supply was minted, False if it already existed.
        """
        existing = await self.db.get(TokenSupply, TokenSupply.SINGLETON_ID)
        if existing is not None:
            return False

        self.db.add(TokenSupply(
            id=TokenSupply.SINGLETON_ID,
            name=name,
            symbol=symbol,
            total_supply=total_supply,
        ))
        self.db.add(TokenAccount(address=holder, balance=total_supply))
        await self.db.flush()

        await self.events.record(
            EventType.MINT,
            timestamp=self.clock(),
            actor=holder,
            address=holder,
            amount=total_supply,
            data={"name": name, "symbol": symbol},
        )

        logger.info("Token supply minted", symbol=symbol, total_supply=total_supply, holder=holder)
        return True
