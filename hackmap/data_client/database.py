# hackmap/data_client/database.py
"""
Database handle (SQLAlchemy engine + session factory).

Responsibilities:
- Build the engine from a URL with pool settings suited to the backend
- Hand out sessions to request handlers (see hackmap.dependencies)
- Retry operations that fail on connection errors (tenacity), refreshing the
  pool between attempts
- Connection health check + optional background monitor

IMPORTANT:
- There is no module-level engine. The application lifespan constructs one
  Database, stores it on app.state, and disposes it at shutdown.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager, suppress
from typing import Callable, Iterator, Optional, TypeVar

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from hackmap.data_client.models import Base
from hackmap.metrics import DB_RETRIES

logger = logging.getLogger("hackmap.database")

T = TypeVar("T")

_MISSING = object()


def _engine_kwargs(url: str, pool_size: int, pool_timeout: float) -> dict:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases only exist per connection: share a single one.
        if url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url:
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {
        "pool_size": pool_size,
        "pool_timeout": pool_timeout,
        "pool_pre_ping": True,
    }


class Database:
    """
    Explicitly constructed data-access handle.

    Usage:
        db = Database("sqlite:///./hackmap.db")
        db.create_all()
        with db.session_scope() as session:
            ...
        db.dispose()
    """

    def __init__(
        self,
        url: str,
        *,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        pool_size: int = 10,
        pool_timeout: float = 10.0,
        echo: bool = False,
    ) -> None:
        self.url = url
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.engine = create_engine(url, echo=echo, **_engine_kwargs(url, pool_size, pool_timeout))
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    def session(self) -> Session:
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on error."""
        session = self.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Retry helpers
    # ------------------------------------------------------------------
    def with_retry(self, operation: Callable[[], T], session: Optional[Session] = None) -> T:
        """
        Run `operation`, retrying on connection errors.

        - only OperationalError is retried (timeouts, dropped connections)
        - the pool is disposed between attempts so the next one reconnects
        - if `session` is given it is rolled back before each retry
        """

        def _before_sleep(retry_state: RetryCallState) -> None:
            DB_RETRIES.inc()
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "Database connection error, retrying... (%s/%s): %s",
                retry_state.attempt_number,
                self.max_retries,
                exc,
            )
            if session is not None:
                session.rollback()
            self.refresh_connection()

        retryer = Retrying(
            reraise=True,
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(OperationalError),
            before_sleep=_before_sleep,
        )
        return retryer(operation)

    def safe_operation(self, operation: Callable[[], T], fallback=_MISSING, session: Optional[Session] = None):
        """
        with_retry() that returns `fallback` instead of raising, when provided.
        """
        try:
            return self.with_retry(operation, session=session)
        except SQLAlchemyError as exc:
            logger.error("Database operation failed: %s", exc)
            if session is not None:
                session.rollback()
            if fallback is not _MISSING:
                return fallback
            raise

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------
    def check_connection(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.error("Database connection check failed: %s", exc)
            return False

    def refresh_connection(self) -> None:
        self.engine.dispose()
        logger.info("Database connection pool refreshed")


class ConnectionMonitor:
    """
    Periodic health probe with an explicit start/stop lifecycle.

    Started by the application lifespan when
    DB_HEALTH_CHECK_INTERVAL_SECONDS > 0.
    """

    def __init__(self, database: Database, interval_seconds: float) -> None:
        self.database = database
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("Database connection monitor started (every %ss)", self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Database connection monitor stopped")

    async def check_once(self) -> bool:
        healthy = await asyncio.to_thread(self.database.check_connection)
        if not healthy:
            logger.warning("Database connection health check failed, refreshing pool")
            await asyncio.to_thread(self.database.refresh_connection)
        return healthy

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.check_once()
            except Exception as exc:
                # The monitor must outlive a single bad probe.
                logger.error("Connection monitoring error: %s", exc)
