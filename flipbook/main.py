from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Generator, Literal, Optional

from fastapi import Depends, FastAPI, File, Query, Request, UploadFile
from fastapi import status
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config, models, service, sql_models, viewer
from .errors import FlipbookError, PersistenceError
from .object_store import MinioBlobStore
from .repositories import (
    InMemoryLinkRepository,
    LinkRepository,
    PostgresLinkRepository,
    UnavailableLinkRepository,
)


# ---- App Setup ----
settings = config.get_settings()
app = FastAPI(title=settings.APP_NAME, version=settings.VERSION)
log = logging.getLogger("flipbook")
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# ---- DI Setup ----
def get_settings() -> config.Settings:
    return config.get_settings()


# Registry used when USE_POSTGRES is off; shared so lookups see earlier uploads.
memory_links = InMemoryLinkRepository()


def get_link_repository(
    settings: config.Settings = Depends(get_settings),
) -> Generator[LinkRepository, None, None]:
    if not settings.USE_POSTGRES:
        yield memory_links
        return
    try:
        db = sql_models.open_session()
    except PersistenceError as exc:
        log.error("Could not open a database session", exc_info=True)
        yield UnavailableLinkRepository(exc)
        return
    try:
        yield PostgresLinkRepository(db)
    finally:
        db.close()


def get_blob_store(settings: config.Settings = Depends(get_settings)) -> MinioBlobStore:
    return MinioBlobStore(settings)


def get_link_service(
    settings: config.Settings = Depends(get_settings),
    blobs: MinioBlobStore = Depends(get_blob_store),
    links: LinkRepository = Depends(get_link_repository),
) -> service.LinkService:
    return service.LinkService(
        blobs=blobs,
        links=links,
        max_upload_bytes=settings.MAX_UPLOAD_BYTES,
        frontend_url=settings.FRONTEND_URL,
        history_default_limit=settings.HISTORY_DEFAULT_LIMIT,
        history_max_limit=settings.HISTORY_MAX_LIMIT,
    )


# ---- Lifecycle ----
@app.on_event("startup")
def startup() -> None:
    if get_settings().USE_POSTGRES:
        try:
            sql_models.init_db()
        except (SQLAlchemyError, ImportError):
            log.error("Could not create the links table; /health will report the registry", exc_info=True)


# ---- API Endpoints ----
@app.get("/")
def index() -> dict:
    return {
        "message": f"{settings.APP_NAME} API",
        "endpoints": {
            "upload": "POST /upload",
            "resolve": "GET /resolve?identifier={id}",
            "history": "GET /history?limit={n}",
            "health": "GET /health",
            "viewer_geometry": "GET /viewer/geometry?width={w}&height={h}&mode={mode}",
            "viewer_config": "GET /viewer/config",
        },
    }


@app.get("/health", response_model=models.HealthOut)
def health(links: LinkRepository = Depends(get_link_repository)):
    try:
        links.ping()
    except PersistenceError:
        log.error("Registry health check failed", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "registry": "unreachable"},
        )
    return models.HealthOut(status="ok", registry="connected")


@app.post("/upload", response_model=models.UploadResult)
async def upload(
    file: Optional[UploadFile] = File(default=None, alias="bookbuddy"),
    link_service: service.LinkService = Depends(get_link_service),
) -> models.UploadResult:
    if file is None:
        return await run_in_threadpool(link_service.upload, None, None, b"")
    # One byte past the ceiling is enough to reject without buffering the rest.
    content = await file.read(link_service.max_upload_bytes + 1)
    return await run_in_threadpool(link_service.upload, file.filename, file.content_type, content)


@app.get("/resolve", response_model=models.LinkOut)
def resolve(
    identifier: Optional[str] = Query(default=None),
    link_service: service.LinkService = Depends(get_link_service),
) -> models.LinkOut:
    return models.LinkOut(**link_service.resolve(identifier).model_dump())


@app.get("/history", response_model=models.HistoryOut)
def history(
    limit: Optional[int] = Query(default=None),
    link_service: service.LinkService = Depends(get_link_service),
) -> models.HistoryOut:
    records = link_service.history(limit)
    return models.HistoryOut(items=[models.LinkOut(**r.model_dump()) for r in records])


@app.get("/viewer/geometry", response_model=models.PageGeometryOut)
def viewer_geometry(
    width: float = Query(gt=0),
    height: float = Query(gt=0),
    mode: Literal["fullscreen", "embedded"] = "fullscreen",
) -> models.PageGeometryOut:
    geometry = viewer.fit_page(width, height, viewer.get_profile(mode))
    return models.PageGeometryOut(width=geometry.width, height=geometry.height)


@app.get("/viewer/config", response_model=models.ViewerConfigOut)
def viewer_config(settings: config.Settings = Depends(get_settings)) -> models.ViewerConfigOut:
    return models.ViewerConfigOut(**asdict(viewer.ViewerOptions.from_settings(settings)))


# ---- Error Handling ----
@app.exception_handler(FlipbookError)
async def flipbook_error_handler(request: Request, exc: FlipbookError):
    if exc.status_code >= 500:
        log.error("%s on %s: %s", type(exc).__name__, request.url.path, exc, exc_info=exc)
    else:
        log.info("Rejected %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in errors
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": f"Malformed request. {detail}".strip()},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": "Endpoint not found", "requestedUrl": request.url.path},
        )
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log.error("Unhandled error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"},
    )
