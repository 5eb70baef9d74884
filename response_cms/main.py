"""Application factory for the Response CMS.

`create_app` wires configuration, logging, the response store and the auth
services onto `app.state`, registers the problem+json handlers and the
request-id/CORS middleware, and mounts the routers. Collaborators can be
injected for tests; otherwise they are built from configuration.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from response_cms.config import AppConfig, load_config
from response_cms.http.problem import (
    handle_cms_error,
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from response_cms.http.request_id import RequestIdMiddleware
from response_cms.logging_setup import configure_logging
from response_cms.logic.credentials import CredentialStore, InMemoryCredentialStore
from response_cms.logic.errors import ResponseCMSError
from response_cms.logic.inmemory_backend import InMemoryBackend
from response_cms.logic.repository_responses import ResponseStore
from response_cms.logic.sheets_backend import GoogleSheetsBackend, TabularBackend
from response_cms.logic.tokens import TokenService
from response_cms.middleware.cors import apply_cors
from response_cms.routes import api_router

logger = logging.getLogger(__name__)


def build_backend(cfg: AppConfig) -> TabularBackend:
    """Return the Google Sheets backend when a sheet id is configured."""
    if cfg.sheets.enabled:
        return GoogleSheetsBackend.from_config(cfg.sheets)
    if cfg.server.is_production:
        raise RuntimeError("GOOGLE_SHEET_ID must be set in production")
    logger.warning("GOOGLE_SHEET_ID not set; using in-memory backend (data is not persisted)")
    return InMemoryBackend()


def create_app(
    config: Optional[AppConfig] = None,
    *,
    store: Optional[ResponseStore] = None,
    credentials: Optional[CredentialStore] = None,
    tokens: Optional[TokenService] = None,
) -> FastAPI:
    cfg = config or load_config()
    configure_logging(cfg.server.log_level)

    if store is None:
        store = ResponseStore(build_backend(cfg))
    if credentials is None:
        credentials = InMemoryCredentialStore.seeded(cfg.auth.admin_username, cfg.auth.admin_password)
    if tokens is None:
        tokens = TokenService.from_config(cfg.auth)

    app = FastAPI(title="Response CMS", version="1.0.0")
    app.state.config = cfg
    app.state.store = store
    app.state.credentials = credentials
    app.state.tokens = tokens
    app.state.backend_kind = "google_sheets" if isinstance(store.backend, GoogleSheetsBackend) else "memory"

    app.add_exception_handler(ResponseCMSError, handle_cms_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    apply_cors(app, origins=cfg.server.cors_origins)
    # Added last so it is outermost and stamps every response, CORS preflights included
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)
    logger.info(
        "app_created environment=%s backend=%s",
        cfg.server.environment,
        app.state.backend_kind,
    )
    return app


__all__ = ["create_app", "build_backend"]
