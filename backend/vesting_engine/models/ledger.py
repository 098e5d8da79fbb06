"""Token ledger models"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, BigInteger, DateTime

from vesting_engine.models.database import Base


class TokenSupply(Base):
    """Fixed-supply token metadata (single row)"""
    __tablename__ = "token_supply"

    SINGLETON_ID = 1

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False)
    symbol = Column(String(10), nullable=False)
    total_supply = Column(BigInteger, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<TokenSupply {self.symbol} ({self.total_supply})>"


class TokenAccount(Base):
    """Balance held by one address"""
    __tablename__ = "token_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String(64), nullable=False, unique=True, index=True)
    balance = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<TokenAccount {self.address[:8]}... ({self.balance})>"
