"""FastAPI application entry point."""

import sys
import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from lotto645.config import settings
from lotto645.errors import LottoError

# Windows asyncio policy for asyncpg compatibility
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configure loguru
settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
logger.remove()
logger.add(sys.stderr, level="DEBUG" if settings.DEBUG else "INFO")
logger.add(settings.LOG_DIR / "app.log", rotation="10 MB", retention="7 days", level="INFO")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("Starting {} ...", settings.APP_NAME)

    from lotto645.db.engine import create_tables, engine
    await create_tables()

    if settings.SCHEDULER_ENABLED:
        from lotto645.scheduler import start_scheduler
        start_scheduler()

    yield

    if settings.SCHEDULER_ENABLED:
        from lotto645.scheduler import stop_scheduler
        stop_scheduler()

    await engine.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="Lotto 6/45 incremental statistics and probability-combination recommendations",
    lifespan=lifespan,
)


@app.exception_handler(LottoError)
async def lotto_error_handler(request: Request, exc: LottoError):
    if exc.status_code >= 500:
        logger.error("{} {} -> {}: {}", request.method, request.url.path, exc.code, exc.message)
    else:
        logger.info("{} {} -> {}: {}", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )


# Include API routers
from lotto645.api.v1.router import api_router  # noqa: E402
app.include_router(api_router, prefix="/api/v1")


@app.get("/health", include_in_schema=False)
async def health():
    return {"status": "ok", "app": settings.APP_NAME}
