import logging
import secrets
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .config import Settings, settings as default_settings
from .errors import AppError
from .routers import analyze, auth, frontend, user
from .services import credentials
from .services.scanner import ReputationClient, ScanOrchestrator
from .services.store import DatabaseStore, Store, build_store
from .services.urlscan import URLScanClient
from .services.virustotal import VirusTotalClient

logger = logging.getLogger("phishlens")
access_log = logging.getLogger("phishlens.http")


def configure_logging(cfg: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, cfg.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _session_secret(cfg: Settings) -> str:
    if cfg.SECRET_KEY:
        return cfg.SECRET_KEY
    logger.warning("SECRET_KEY is not set; using a random key, sessions will not survive a restart")
    return secrets.token_urlsafe(32)


def build_orchestrator(
    cfg: Settings,
    reputation: ReputationClient | None = None,
    urlscan: ReputationClient | None = None,
) -> ScanOrchestrator:
    if reputation is None:
        if not cfg.VIRUSTOTAL_API_KEY:
            logger.warning("VIRUSTOTAL_API_KEY is not set; analyze requests will fail")
        reputation = VirusTotalClient(
            cfg.VIRUSTOTAL_API_KEY,
            base_url=cfg.VIRUSTOTAL_BASE_URL,
            timeout=cfg.EXTERNAL_TIMEOUT,
        )
    if urlscan is None and cfg.URLSCAN_API_KEY:
        urlscan = URLScanClient(
            cfg.URLSCAN_API_KEY,
            base_url=cfg.URLSCAN_BASE_URL,
            visibility=cfg.URLSCAN_VISIBILITY,
            timeout=cfg.EXTERNAL_TIMEOUT,
        )
    return ScanOrchestrator(reputation, urlscan=urlscan, max_urls=cfg.MAX_EMAIL_URLS)


def create_app(
    settings: Settings | None = None,
    store: Store | None = None,
    reputation: ReputationClient | None = None,
    urlscan: ReputationClient | None = None,
) -> FastAPI:
    cfg = settings or default_settings
    configure_logging(cfg)

    store = store or build_store(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if isinstance(store, DatabaseStore):
            from .db import wait_for_db
            await wait_for_db(store.engine)
        # warm the dummy hash for the configured cost
        await run_in_threadpool(credentials.dummy_hash, cfg.BCRYPT_ROUNDS)
        yield
        await store.close()

    app = FastAPI(title=cfg.APP_NAME, lifespan=lifespan)
    app.state.settings = cfg
    app.state.store = store
    app.state.orchestrator = build_orchestrator(cfg, reputation, urlscan)

    # ---------------------------------------------------
    # Middleware (last added runs first)
    # ---------------------------------------------------
    app.add_middleware(
        SessionMiddleware,
        secret_key=_session_secret(cfg),
        session_cookie=cfg.SESSION_COOKIE,
        max_age=cfg.SESSION_MAX_AGE,
        same_site="lax",
        https_only=cfg.SESSION_HTTPS_ONLY,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        access_log.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    # ---------------------------------------------------
    # Errors -> {"error": ..., "details"?: ...}
    # ---------------------------------------------------
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # ---------------------------------------------------
    # Health check
    # ---------------------------------------------------
    @app.get("/api/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    # ---------------------------------------------------
    # Routers (SPA fallback last)
    # ---------------------------------------------------
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(user.router, prefix="/api/user", tags=["user"])
    app.include_router(analyze.router, prefix="/api/analyze", tags=["analyze"])
    app.include_router(frontend.router)

    return app


app = create_app()

# ---------------------------------------------------
# Note:
# Start with `uvicorn phishlens.main:app`; don't call uvicorn.run() here.
# ---------------------------------------------------
