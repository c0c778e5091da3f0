"""
FastAPI entrypoint for the court facilities service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from court_facilities.api import routers
from court_facilities.cache import QueryCache
from court_facilities.config import Settings, get_settings
from court_facilities.court import CourtRoomDirectory, CourtSessionService, CoverageService, ReviewStore
from court_facilities.db import TableGateway
from court_facilities.db.session import close_connection_pool, get_connection_pool
from court_facilities.errors import FacilitiesError, ValidationError, pydantic_errors
from court_facilities.ingestion import ExtractionClient, ReportIngestionPipeline, StorageClient
from court_facilities.lighting import LightingService
from court_facilities.spaces import QuickSpaceCreator, UnifiedSpaceService

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def _error_body(exc: FacilitiesError, settings: Settings) -> dict:
    body: dict = {"error": exc.user_message}
    if isinstance(exc, ValidationError) and exc.errors:
        body["errors"] = exc.errors
    if exc.detail and settings.expose_backend_errors:
        body["detail"] = exc.detail
    return body


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(FacilitiesError)
    async def facilities_error_handler(request: Request, exc: FacilitiesError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc, request.app.state.settings))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = pydantic_errors(exc)
        message = errors[0]["message"] if len(errors) == 1 else "Invalid request"
        return JSONResponse(status_code=422, content={"error": message, "errors": errors})


def create_app(
    settings: Settings | None = None,
    gateway: TableGateway | None = None,
    storage: StorageClient | None = None,
    extractor: ExtractionClient | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)

    db_pool = None
    if gateway is None:
        db_pool = get_connection_pool(settings)
        gateway = TableGateway(db_pool)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if db_pool is not None:
            db_pool.open()
            logger.info("Database pool opened (%d-%d)", settings.db_pool_min_size, settings.db_pool_max_size)
        yield
        if db_pool is not None:
            close_connection_pool()

    cache = QueryCache()
    rooms = CourtRoomDirectory(gateway, cache)
    sessions = CourtSessionService(gateway, cache, rooms)
    reviews = ReviewStore()
    storage = storage or StorageClient(settings)
    extractor = extractor or ExtractionClient(settings)
    spaces = UnifiedSpaceService(gateway, cache)

    app = FastAPI(title="Court Facilities", version="0.1.0", lifespan=lifespan)
    for router in routers:
        app.include_router(router)
    register_error_handlers(app)

    app.state.settings = settings
    app.state.cache = cache
    app.state.gateway = gateway
    app.state.rooms = rooms
    app.state.sessions = sessions
    app.state.coverage = CoverageService(gateway, cache, rooms)
    app.state.reviews = reviews
    app.state.pipeline = ReportIngestionPipeline(settings, gateway, storage, extractor, rooms, sessions, reviews)
    app.state.lighting = LightingService(gateway, cache)
    app.state.spaces = spaces
    app.state.quick_spaces = QuickSpaceCreator(spaces)
    return app


app = create_app()
