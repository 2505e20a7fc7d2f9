"""ChildTrack API application entry point."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()  # load .env before anything reads os.getenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from childtrack.api.routes import (
    children_router, events_router, health_router, reports_router, stats_router,
)
from childtrack.services.database import DATABASE_URL, EventStoreUnavailableError, create_tables
from childtrack.stats.buckets import DEFAULT_TIMEZONE, InvalidWindowError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the SQLite tables at startup."""
    await create_tables()
    logger.info("SQLite tables ready at %s (day buckets in %s)", DATABASE_URL, DEFAULT_TIMEZONE)

    yield

    logger.info("ChildTrack API stopped")


app = FastAPI(
    title="ChildTrack API",
    description=(
        "Child activity tracker: sleep, feedings, diapers, growth, medication "
        "and temperature, with day-bucketed trends and saved reports."
    ),
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(InvalidWindowError)
async def invalid_window_handler(request: Request, exc: InvalidWindowError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(EventStoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: EventStoreUnavailableError) -> JSONResponse:
    logger.error("Event store unavailable on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=503, content={"detail": "Event store unavailable, try again later"})


app.include_router(health_router)
app.include_router(children_router)
app.include_router(events_router)
app.include_router(stats_router)
app.include_router(reports_router)
