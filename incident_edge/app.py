# ================================
# FILE: incident_edge/app.py
# ================================
import logging
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from incident_edge.config import Settings
from incident_edge.database import Base, make_engine, make_session_factory
from incident_edge.geocoding import GeoapifyGeocoder
from incident_edge.responses import (
    PreflightCORSMiddleware,
    guard_unexpected_errors,
    http_exception_handler,
    validation_exception_handler,
)
from incident_edge.security import CredentialHasher
from incident_edge.storage import SupabaseStorage
from incident_edge.store import PostgrestStore, SqlStore

log = logging.getLogger("uvicorn.error").getChild("app")


def build_store(settings: Settings):
    if settings.database_url:
        engine = make_engine(settings.database_url)
        # no-op for tables that already exist
        Base.metadata.create_all(bind=engine)
        return SqlStore(make_session_factory(engine))
    return PostgrestStore(settings.supabase_url, settings.service_role_key, timeout=settings.http_timeout)


def create_app(settings: Settings, *, store=None, storage=None, geocoder=None, hasher=None) -> FastAPI:
    """Build the API. Any collaborator left as None is built from ``settings``."""
    app = FastAPI(
        title="Incident Edge API",
        docs_url="/docs" if settings.show_docs else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.show_docs else None,
    )

    app.state.settings = settings
    app.state.store = store or build_store(settings)
    app.state.storage = storage or SupabaseStorage(
        settings.supabase_url, settings.service_role_key, settings.storage_bucket,
        timeout=settings.http_timeout,
    )
    app.state.geocoder = geocoder or GeoapifyGeocoder(
        settings.geocode_key, settings.geocode_url, timeout=settings.http_timeout,
    )
    app.state.hasher = hasher or CredentialHasher(rounds=settings.bcrypt_rounds)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # last added runs outermost: CORS headers land on guarded 500s too
    app.middleware("http")(guard_unexpected_errors)
    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    from incident_edge.routes_auth import router as auth_router
    from incident_edge.routes_reports import router as reports_router
    from incident_edge.routes_ops import router as ops_router

    app.include_router(auth_router)
    app.include_router(reports_router)
    app.include_router(ops_router)

    log.info("[app] store=%s", type(app.state.store).__name__)
    return app
