"""Application configuration"""
from functools import lru_cache
from typing import Dict, Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class AllocationRuleConfig(BaseModel):
    """Allocation rule for one beneficiary category.

    kind="fixed" grants `amount` tokens; kind="supply_share" grants
    `basis_points` / 10000 of the token's total supply.
    """
    kind: Literal["fixed", "supply_share"]
    amount: int = 0
    basis_points: int = 0


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "Vesting Engine API"
    app_version: str = "0.1.0"
    debug: bool = False

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"

    # Database
    database_url: str = "sqlite+aiosqlite:///./vesting.db"
    database_pool_size: int = 10

    # Identities
    manager_address: str = "manager"
    engine_address: str = "vesting-engine"

    # Token ledger bootstrap
    token_name: str = "Vesting Token"
    token_symbol: str = "VEST"
    token_total_supply: int = 1_000_000_000

    # Category name (seed/team/advisor) -> rule. Supplied as JSON, e.g.
    # ALLOCATION_RULES='{"seed": {"kind": "fixed", "amount": 1000}}'
    allocation_rules: Dict[str, AllocationRuleConfig] = {}

    # Background settlement on behalf of beneficiaries (0 disables it)
    auto_claim_interval_seconds: int = 0

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
