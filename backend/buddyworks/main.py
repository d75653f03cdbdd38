import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.trustedhost import TrustedHostMiddleware

from buddyworks.models import HealthResponse
from buddyworks.routers import auth, bookings, services, users
from buddyworks.services.document_store import DocumentStore, store_from_env

logger = logging.getLogger(__name__)
request_logger = logging.getLogger("buddyworks.requests")


def _parse_csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _configure_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def _lifespan(app: FastAPI):
    store: DocumentStore = app.state.document_store
    await store.connect()
    yield
    await store.close()


def create_app(store: Optional[DocumentStore] = None) -> FastAPI:
    _configure_logging()
    app = FastAPI(title="BuddyWorks API", version="0.1.0", lifespan=_lifespan)
    app.state.document_store = store if store is not None else store_from_env()
    logger.info("Document store: %s", type(app.state.document_store).__name__)

    cors_origins = _parse_csv_env("CORS_ORIGINS", "http://localhost:5173,http://buddyworks.surge.sh")
    allow_any_origin = len(cors_origins) == 1 and cors_origins[0] == "*"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        # Browsers reject wildcard CORS with credentials enabled.
        allow_credentials=not allow_any_origin,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    trusted_hosts = _parse_csv_env("TRUSTED_HOSTS", "*")
    if not (len(trusted_hosts) == 1 and trusted_hosts[0] == "*"):
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        request_logger.info(
            "%s %s -> %s (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(services.router)
    app.include_router(bookings.router)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Server is running"

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(status="ok")

    @app.get("/ready", response_model=HealthResponse)
    async def ready():
        if not await app.state.document_store.ping():
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return HealthResponse(status="ready")

    return app


app = create_app()
