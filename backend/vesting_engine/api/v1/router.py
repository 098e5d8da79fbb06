"""API v1 router aggregation"""
from fastapi import APIRouter

from vesting_engine.api.v1 import vesting, ledger, events

api_router = APIRouter()

api_router.include_router(vesting.router, prefix="/vesting", tags=["Vesting"])
api_router.include_router(ledger.router, prefix="/ledger", tags=["Ledger"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
