import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .api.middleware import setup_middleware
from .api.routes import router
from .config import settings
from .core.errors import ContentUnavailable, InvalidTransition, SessionNotFound

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Brand Style Quiz service...")
    if not settings.AIRTABLE_API_KEY:
        logger.warning("AIRTABLE_API_KEY is not configured; quiz content cannot be loaded")

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title="Brand Style Quiz",
    description="Binary-choice style quiz scoring and template matching",
    version=__version__,
    lifespan=lifespan
)

setup_middleware(app)

app.include_router(router, prefix="/api/v1", tags=["Quiz"])


def _error_body(message: str) -> dict:
    return {"detail": message, "timestamp": datetime.now().isoformat()}


@app.exception_handler(ContentUnavailable)
async def content_unavailable_handler(request: Request, exc: ContentUnavailable):
    logger.warning(f"Quiz content unavailable for {request.url.path}: {exc}")
    return JSONResponse(status_code=404, content=_error_body(str(exc)))


@app.exception_handler(SessionNotFound)
async def session_not_found_handler(request: Request, exc: SessionNotFound):
    return JSONResponse(status_code=404, content=_error_body(str(exc)))


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    return JSONResponse(status_code=409, content=_error_body(str(exc)))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "timestamp": datetime.now().isoformat()
        }
    )
