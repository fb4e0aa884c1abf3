"""
HEALTH MONITOR - Database Connection Manager
============================================
Lazily built engine plus a transactional session scope for SQLStore.
"""

import logging
from typing import Any, Dict, Generator, Optional
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from .config import DatabaseConfig

logger = logging.getLogger(__name__)


def _engine_options(config: DatabaseConfig) -> Dict[str, Any]:
    if config.is_sqlite:
        # TestClient and the threadpool touch the same file from several threads
        return {"connect_args": {"check_same_thread": False}, "echo": config.echo}
    return {
        "pool_pre_ping": True,
        "pool_size": config.pool_size,
        "max_overflow": config.max_overflow,
        "pool_timeout": config.pool_timeout,
        "pool_recycle": config.pool_recycle,
        "echo": config.echo,
    }


class DatabaseManager:
    """
    Owns the SQLAlchemy engine for one database URL.

    The engine is created on first use so that building a store never
    opens a connection by itself.
    """

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self.config = config or DatabaseConfig()
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_engine(self.config.url, **_engine_options(self.config))
            self._session_factory = sessionmaker(
                bind=self._engine, autoflush=False, expire_on_commit=False,
            )
            logger.info(f"Database engine created: {self.config.safe_url}")
        return self._engine

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Unit of work: commit when the block exits cleanly, roll back otherwise."""
        self.engine
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> bool:
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False
        return True

    def create_tables(self) -> None:
        from .models import Base

        Base.metadata.create_all(self.engine)
        logger.info(f"Ensured tables: {', '.join(sorted(Base.metadata.tables))}")

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connections closed")
