import logging
import time
from contextlib import asynccontextmanager
from dataclasses import asdict
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StrictInt

from cadence.application.config import AppConfig, resolve_config
from cadence.application.factory import get_catalog, get_session_controller
from cadence.application.session import SessionController, SessionState
from cadence.consts import VERSION
from cadence.domain.errors import (
    CadenceError,
    EmptyDueSetError,
    InvalidRatingError,
    NotInSessionError,
    SessionInProgressError,
)
from cadence.infrastructure.adapters.yaml_catalog import InMemoryCatalog

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cadence.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Cadence Server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("Cadence Server shutting down...")


app = FastAPI(
    title="Cadence Server",
    description="Spaced-repetition review sessions over HTTP.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


# ---------- Dependencies ----------


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    return resolve_config()


@lru_cache(maxsize=1)
def get_controller() -> SessionController:
    # One controller for the process: the server serves a single learner.
    return get_session_controller(get_config())


def get_item_catalog() -> InMemoryCatalog:
    return get_catalog(get_config())


# ---------- Error mapping ----------

ERROR_STATUS: dict[type[CadenceError], int] = {
    InvalidRatingError: 422,
    EmptyDueSetError: 404,
    SessionInProgressError: 409,
    NotInSessionError: 409,
}


@app.exception_handler(CadenceError)
async def cadence_error_handler(request: Request, exc: CadenceError):
    status = next(
        (code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)),
        500,
    )
    if status == 500:
        logger.error(f"{request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


# ---------- Models ----------


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class DueResponse(BaseModel):
    total: int
    due: int
    new: int
    scheduled: int
    next_due_at: int | None


class SessionStartResponse(BaseModel):
    queue: list[str]
    total: int


class CurrentCardResponse(BaseModel):
    item_id: str
    question: str | None
    answer: str | None
    position: int
    total: int
    remaining: int


class RateRequest(BaseModel):
    rating: StrictInt  # "3", 3.0 and true are refused, not coerced


class RecordResponse(BaseModel):
    item_id: str
    ease_factor: float
    interval: int
    repetitions: int
    last_reviewed_at: int | None
    due_at: int | None


class RateResponse(BaseModel):
    record: RecordResponse
    advanced: bool
    state: SessionState


class StateResponse(BaseModel):
    state: SessionState


# ---------- Routes ----------


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/due", response_model=DueResponse)
def due_summary(controller: SessionController = Depends(get_controller)):
    """Counts of due, new and scheduled cards."""
    return DueResponse(**asdict(controller.due_summary()))


@app.post("/session/start", response_model=SessionStartResponse)
def start_session(controller: SessionController = Depends(get_controller)):
    queue = controller.start_session()
    logger.info(f"Session started with {len(queue)} card(s)")
    return SessionStartResponse(queue=list(queue), total=len(queue))


@app.get("/session/current", response_model=CurrentCardResponse)
def current_card(
    controller: SessionController = Depends(get_controller),
    catalog: InMemoryCatalog = Depends(get_item_catalog),
):
    item_id = controller.current_item()
    progress = controller.progress()
    item = catalog.get(item_id)
    return CurrentCardResponse(
        item_id=item_id,
        question=item.question if item else None,
        answer=item.answer if item else None,
        position=progress.position,
        total=progress.total,
        remaining=progress.remaining,
    )


@app.post("/session/rate", response_model=RateResponse)
def rate_card(req: RateRequest, controller: SessionController = Depends(get_controller)):
    result = controller.rate(req.rating)
    record = result.record
    return RateResponse(
        record=RecordResponse(
            item_id=record.item_id,
            ease_factor=record.ease_factor,
            interval=record.interval,
            repetitions=record.repetitions,
            last_reviewed_at=record.last_reviewed_at,
            due_at=record.due_at,
        ),
        advanced=result.advanced,
        state=controller.state,
    )


@app.post("/session/abort", response_model=StateResponse)
def abort_session(controller: SessionController = Depends(get_controller)):
    controller.abort()
    logger.info("Session aborted")
    return StateResponse(state=controller.state)
