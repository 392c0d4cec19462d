"""File upload and browsing service"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.filedrop.core.config import settings
from src.filedrop.core.constants import APP_DESCRIPTION, APP_TITLE, APP_VERSION, STATIC_DIR
from src.filedrop.core.exceptions import FileDropError
from src.filedrop.core.models import ErrorResponse
from src.filedrop.core.paths import PathResolver
from src.filedrop.core.rate_limiter import limiter

from .api.dependencies import thumbnail_worker
from .api.routes import router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:  # noqa: ARG001
    """Create storage directories and drain thumbnail jobs on shutdown."""
    PathResolver(settings.base_dir).ensure_directories()
    logger.info("Serving and storing files in: %s", settings.base_dir)
    yield
    thumbnail_worker.shutdown(wait=True)


async def filedrop_error_handler(request: Request, exc: FileDropError) -> JSONResponse:  # noqa: ARG001
    """Render storage core errors as JSON."""
    error = ErrorResponse(detail=exc.detail, status_code=exc.status_code)
    return JSONResponse(error.model_dump(), status_code=exc.status_code)


app = FastAPI(
    title=APP_TITLE,
    description=APP_DESCRIPTION,
    version=APP_VERSION,
    lifespan=lifespan,
)

# Add rate limiting to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(FileDropError, filedrop_error_handler)

# Static files, mounted before the catch-all file route
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# Include API routes
app.include_router(router)


def run() -> None:
    """Start the server with the configured host and port."""
    uvicorn.run(app, host=settings.host, port=settings.port)
