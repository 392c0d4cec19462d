"""API routes for uploading, listing, deleting and serving files."""

import os
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi import Path as PathParam
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool

from src.filedrop.api.dependencies import (
    get_listing_engine,
    get_path_resolver,
    get_upload_ingestor,
    require_auth,
)
from src.filedrop.core.constants import (
    APP_VERSION,
    ERROR_FILE_NOT_FOUND,
    HTTP_303_SEE_OTHER,
    TEMPLATES_DIR,
    UPLOAD_RATE_LIMIT,
)
from src.filedrop.core.exceptions import StoredFileNotFoundError
from src.filedrop.core.models import HealthCheck, SortKey, UploadResponse
from src.filedrop.core.paths import PathResolver
from src.filedrop.core.rate_limiter import limiter
from src.filedrop.services.deletion import delete_stored_file
from src.filedrop.services.listing import DateFilter, RecentListingEngine
from src.filedrop.services.multipart import iter_multipart
from src.filedrop.services.upload import UploadIngestor

router = APIRouter()
templates = Jinja2Templates(directory=TEMPLATES_DIR)

Year = Annotated[int, PathParam(ge=1, le=9999)]
Month = Annotated[int, PathParam(ge=1, le=12)]
Page = Annotated[int, Query(ge=0, description="Zero-based page index")]
Engine = Annotated[RecentListingEngine, Depends(get_listing_engine)]

LISTING_BASES = {SortKey.DATE: "/recent", SortKey.SIZE: "/largest"}


def _render_listing(
    request: Request,
    engine: RecentListingEngine,
    sort: SortKey,
    page: int,
    year: int | None = None,
    month: int | None = None,
) -> HTMLResponse:
    """Render one page of the stored file listing."""
    listing = engine.list_page(DateFilter(year=year, month=month), sort=sort, page=page)

    base = LISTING_BASES[sort]
    if year is not None:
        base = f"{base}/{year}"
    if month is not None:
        base = f"{base}/{month}"

    return templates.TemplateResponse(
        request,
        "recent.html",
        {"listing": listing, "base": base, "bases": LISTING_BASES},
    )


@router.get("/", response_class=HTMLResponse)
async def main_page(request: Request) -> HTMLResponse:
    """Main page."""
    return templates.TemplateResponse(request, "index.html", {})


@router.post(
    "/",
    response_model=UploadResponse,
    dependencies=[Depends(require_auth)],
)
@limiter.limit(UPLOAD_RATE_LIMIT)
async def upload_file(
    request: Request,
    ingestor: Annotated[UploadIngestor, Depends(get_upload_ingestor)],
) -> JSONResponse:
    """Upload a file, optionally keeping its original name."""
    events = iter_multipart(request.headers.get("content-type"), request.stream())
    result = await ingestor.ingest(events)

    body = UploadResponse(url=result.url).model_dump()
    if result.redirect:
        return JSONResponse(
            body,
            status_code=HTTP_303_SEE_OTHER,
            headers={"Location": result.url},
        )
    return JSONResponse(body)


@router.get("/recent", response_class=HTMLResponse, dependencies=[Depends(require_auth)])
def recent(request: Request, engine: Engine, page: Page = 0) -> HTMLResponse:
    """Most recently modified files."""
    return _render_listing(request, engine, SortKey.DATE, page)


@router.get("/recent/{year}", response_class=HTMLResponse, dependencies=[Depends(require_auth)])
def recent_year(request: Request, engine: Engine, year: Year, page: Page = 0) -> HTMLResponse:
    """Most recently modified files of a year."""
    return _render_listing(request, engine, SortKey.DATE, page, year)


@router.get(
    "/recent/{year}/{month}",
    response_class=HTMLResponse,
    dependencies=[Depends(require_auth)],
)
def recent_month(
    request: Request,
    engine: Engine,
    year: Year,
    month: Month,
    page: Page = 0,
) -> HTMLResponse:
    """Most recently modified files of a month."""
    return _render_listing(request, engine, SortKey.DATE, page, year, month)


@router.get("/largest", response_class=HTMLResponse, dependencies=[Depends(require_auth)])
def largest(request: Request, engine: Engine, page: Page = 0) -> HTMLResponse:
    """Largest files."""
    return _render_listing(request, engine, SortKey.SIZE, page)


@router.get("/largest/{year}", response_class=HTMLResponse, dependencies=[Depends(require_auth)])
def largest_year(request: Request, engine: Engine, year: Year, page: Page = 0) -> HTMLResponse:
    """Largest files of a year."""
    return _render_listing(request, engine, SortKey.SIZE, page, year)


@router.get(
    "/largest/{year}/{month}",
    response_class=HTMLResponse,
    dependencies=[Depends(require_auth)],
)
def largest_month(
    request: Request,
    engine: Engine,
    year: Year,
    month: Month,
    page: Page = 0,
) -> HTMLResponse:
    """Largest files of a month."""
    return _render_listing(request, engine, SortKey.SIZE, page, year, month)


@router.post("/delete", dependencies=[Depends(require_auth)])
async def delete_file(
    filename: Annotated[str, Form()],
    paths: Annotated[PathResolver, Depends(get_path_resolver)],
) -> RedirectResponse:
    """Delete a stored file and its thumbnail."""
    await run_in_threadpool(delete_stored_file, paths, filename)
    return RedirectResponse("/recent", status_code=HTTP_303_SEE_OTHER)


@router.get("/health")
async def health_check(
    paths: Annotated[PathResolver, Depends(get_path_resolver)],
) -> HealthCheck:
    """Health check endpoint."""
    base_dir = paths.directory()

    return HealthCheck(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=APP_VERSION,
        storage_writable=os.access(base_dir, os.W_OK),
    )


@router.get("/{file_path:path}")
async def serve_file(
    file_path: str,
    paths: Annotated[PathResolver, Depends(get_path_resolver)],
) -> FileResponse:
    """Serve a stored file or thumbnail."""
    root = paths.base_dir.resolve()
    target = (root / file_path).resolve()

    if not target.is_relative_to(root) or not target.is_file():
        raise StoredFileNotFoundError(ERROR_FILE_NOT_FOUND)

    return FileResponse(path=target, headers={"Content-Disposition": "inline"})
