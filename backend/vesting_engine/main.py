"""Vesting Engine API - Main Application"""
import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vesting_engine.config import get_settings
from vesting_engine.api.v1.router import api_router
from vesting_engine.errors import VestingError
from vesting_engine.models.database import init_db, close_db, async_session_factory
from vesting_engine.services.engine import bootstrap_engine
from vesting_engine.services.auto_claim import start_auto_claim_scheduler, stop_auto_claim_scheduler

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Vesting Engine API", version=settings.app_version)

    await init_db()
    logger.info("Database initialized")

    async with async_session_factory() as db:
        if await bootstrap_engine(db, settings):
            logger.info("Token ledger bootstrapped", manager=settings.manager_address)

    if settings.auto_claim_interval_seconds > 0:
        await start_auto_claim_scheduler(interval_seconds=settings.auto_claim_interval_seconds)

    yield

    await stop_auto_claim_scheduler()
    await close_db()
    logger.info("Vesting Engine API shutdown complete")


async def vesting_error_handler(request: Request, exc: VestingError) -> JSONResponse:
    """Render engine failures with their specific error kind"""
    logger.warning("Operation rejected", path=request.url.path, error=exc.code, detail=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
    )


def create_app() -> FastAPI:
    """Create FastAPI application"""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="API for the token vesting engine",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(VestingError, vesting_error_handler)
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.app_version,
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "vesting_engine.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
