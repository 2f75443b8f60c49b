# hackmap/main.py
import logging
import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sqlalchemy.exc import OperationalError

from hackmap import config
from hackmap.data_client.database import ConnectionMonitor, Database
from hackmap.email_client.mailer import Mailer
from hackmap.errors import HackMapError
from hackmap.metrics import REGISTRY
from hackmap.routes import routers

# ----------------------------------------------------------------------
# Logger configuration
# ----------------------------------------------------------------------
logger = logging.getLogger("hackmap")
logger.setLevel(logging.DEBUG if config.DEBUG else logging.INFO)
handler = logging.StreamHandler()
formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
handler.setFormatter(formatter)

if not logger.handlers:
    logger.addHandler(handler)
else:
    for h in logger.handlers:
        h.setFormatter(formatter)


def create_app(database: Optional[Database] = None, mailer: Optional[Mailer] = None) -> FastAPI:
    """
    Build the application.

    `database` and `mailer` override the handles the lifespan would otherwise
    build from config (tests pass an in-memory database and a console mailer).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config.validate_config()

        db = database or Database(
            config.DATABASE_URL,
            max_retries=config.DB_MAX_RETRIES,
            retry_delay=config.DB_RETRY_DELAY_SECONDS,
            pool_size=config.DB_POOL_SIZE,
            pool_timeout=config.DB_POOL_TIMEOUT_SECONDS,
        )
        db.create_all()
        app.state.database = db
        app.state.mailer = mailer or Mailer()
        logger.info("HackMap started (env=%s, mail=%s)", config.APP_ENV, app.state.mailer.provider)

        monitor = None
        if config.DB_HEALTH_CHECK_INTERVAL_SECONDS > 0:
            monitor = ConnectionMonitor(db, config.DB_HEALTH_CHECK_INTERVAL_SECONDS)
            monitor.start()

        try:
            yield
        finally:
            if monitor is not None:
                await monitor.stop()
            db.dispose()
            logger.info("HackMap stopped")

    app = FastAPI(title="HackMap", debug=config.DEBUG, lifespan=lifespan)

    # ------------------------------------------------------------------
    # CORS
    # ------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.APP_BASE_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ------------------------------------------------------------------
    # Routers (single source of truth: hackmap/routes/__init__.py)
    # ------------------------------------------------------------------
    for r in routers:
        app.include_router(r)

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------
    app.mount("/metrics", make_asgi_app(registry=REGISTRY))

    # ------------------------------------------------------------------
    # Exception handlers
    # ------------------------------------------------------------------
    @app.exception_handler(HackMapError)
    async def hackmap_error_handler(request: Request, exc: HackMapError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code} on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "detail": exc.message},
        )

    @app.exception_handler(OperationalError)
    async def database_error_handler(request: Request, exc: OperationalError):
        logger.error(f"Database unavailable on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=503,
            content={"error": "database_unavailable", "detail": "Database temporarily unavailable"},
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}\n{traceback.format_exc()}"
        )
        detail = str(exc) if app.debug else "Internal server error"
        return JSONResponse(
            status_code=500,
            content={"error": "internal_server_error", "detail": detail},
        )

    return app


app = create_app()
