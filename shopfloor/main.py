from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from shopfloor.api.router import api_router
from shopfloor.config import get_settings
from shopfloor.core.database import dispose_engines
from shopfloor.core.errors import register_exception_handlers
from shopfloor.core.logging import get_logger, setup_logging
from shopfloor.core.rate_limit import limiter, rate_limit_exceeded_handler
from shopfloor.core.scheduler import start_scheduler, stop_scheduler
from shopfloor.services.jobs import get_job_manager

settings = get_settings()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    # Startup
    setup_logging()
    await start_scheduler()
    logger.info("shopfloor_gateway_started")
    yield
    # Shutdown
    await stop_scheduler()
    await get_job_manager().shutdown()
    await dispose_engines()
    logger.info("shopfloor_gateway_stopped")


app = FastAPI(
    title="Shopfloor Gateway",
    description="Production floor API over the ERP stored procedures",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
register_exception_handlers(app)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for load balancers."""
    return {"status": "healthy"}
