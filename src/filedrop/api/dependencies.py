"""FastAPI dependency providers."""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from src.filedrop.core.config import Settings, get_settings, settings
from src.filedrop.core.constants import (
    AUTH_REALM,
    ERROR_AUTHENTICATION_FAILED,
    HTTP_401_UNAUTHORIZED,
)
from src.filedrop.core.paths import PathResolver
from src.filedrop.core.thumbnails import ThumbnailWorker
from src.filedrop.services.listing import RecentListingEngine
from src.filedrop.services.upload import UploadIngestor

basic_auth = HTTPBasic(realm=AUTH_REALM, auto_error=False)

# Global thumbnail worker, shut down by the application lifespan
thumbnail_worker = ThumbnailWorker(
    size=settings.thumbnail_size,
    max_workers=settings.thumbnail_workers,
)


def get_thumbnail_worker() -> ThumbnailWorker:
    """Dependency to get the background thumbnail worker."""
    return thumbnail_worker


def get_path_resolver(
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> PathResolver:
    """Dependency to get a resolver for the configured base directory."""
    return PathResolver(app_settings.base_dir)


def get_upload_ingestor(
    app_settings: Annotated[Settings, Depends(get_settings)],
    paths: Annotated[PathResolver, Depends(get_path_resolver)],
    worker: Annotated[ThumbnailWorker, Depends(get_thumbnail_worker)],
) -> UploadIngestor:
    """Dependency to get the upload ingestor."""
    return UploadIngestor(paths, worker, app_settings.server_url)


def get_listing_engine(
    app_settings: Annotated[Settings, Depends(get_settings)],
    paths: Annotated[PathResolver, Depends(get_path_resolver)],
) -> RecentListingEngine:
    """Dependency to get the listing engine."""
    return RecentListingEngine(paths, app_settings.page_size)


def require_auth(
    app_settings: Annotated[Settings, Depends(get_settings)],
    credentials: Annotated[HTTPBasicCredentials | None, Depends(basic_auth)],
) -> None:
    """Require basic auth credentials when both user and password are configured."""
    if not app_settings.auth_enabled:
        return

    if credentials is not None:
        user_ok = secrets.compare_digest(
            credentials.username.encode(),
            (app_settings.auth_user or "").encode(),
        )
        pass_ok = secrets.compare_digest(
            credentials.password.encode(),
            (app_settings.auth_pass or "").encode(),
        )
        if user_ok and pass_ok:
            return

    raise HTTPException(
        status_code=HTTP_401_UNAUTHORIZED,
        detail=ERROR_AUTHENTICATION_FAILED,
        headers={"WWW-Authenticate": f'Basic realm="{AUTH_REALM}"'},
    )
