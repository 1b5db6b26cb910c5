"""Database configuration and session management."""

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import MetaData, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

# Metadata with naming convention for constraints
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Create base class for all models
Base = declarative_base(metadata=MetaData(naming_convention=naming_convention))

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./jurybox.db"


class DatabaseConfig:
    """Database configuration settings."""

    def __init__(
        self,
        database_url: str = DEFAULT_DATABASE_URL,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        pool_pre_ping: bool = True,
    ):
        self.database_url = database_url
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.pool_recycle = pool_recycle
        self.pool_pre_ping = pool_pre_ping

    @property
    def is_sqlite(self) -> bool:
        return "sqlite" in self.database_url

    @property
    def sync_database_url(self) -> str:
        """Driver-less URL for migration tooling."""
        url = self.database_url
        if "postgresql+asyncpg" in url:
            return url.replace("postgresql+asyncpg", "postgresql+psycopg2")
        if "sqlite+aiosqlite" in url:
            return url.replace("sqlite+aiosqlite", "sqlite")
        return url

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Create configuration from environment variables."""
        database_url = os.getenv(
            "JURYBOX_DATABASE_URL", os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        )

        return cls(
            database_url=database_url,
            echo=os.getenv("JURYBOX_DATABASE_ECHO", "false").lower() == "true",
            pool_size=int(os.getenv("JURYBOX_DATABASE_POOL_SIZE", "10")),
            max_overflow=int(os.getenv("JURYBOX_DATABASE_MAX_OVERFLOW", "20")),
            pool_timeout=int(os.getenv("JURYBOX_DATABASE_POOL_TIMEOUT", "30")),
            pool_recycle=int(os.getenv("JURYBOX_DATABASE_POOL_RECYCLE", "3600")),
            pool_pre_ping=os.getenv("JURYBOX_DATABASE_POOL_PRE_PING", "true").lower() == "true",
        )


class DatabaseManager:
    """Database connection and session manager."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._async_engine: Optional[AsyncEngine] = None
        self._async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    def get_async_engine(self) -> AsyncEngine:
        """Get or create async database engine."""
        if self._async_engine is None:
            engine_kwargs: Dict[str, Any] = {
                "echo": self.config.echo,
                "pool_pre_ping": self.config.pool_pre_ping,
            }

            # SQLite connections are not shared across tasks
            if self.config.is_sqlite:
                engine_kwargs["poolclass"] = NullPool
            else:
                engine_kwargs.update(
                    {
                        "pool_size": self.config.pool_size,
                        "max_overflow": self.config.max_overflow,
                        "pool_timeout": self.config.pool_timeout,
                        "pool_recycle": self.config.pool_recycle,
                    }
                )

            self._async_engine = create_async_engine(self.config.database_url, **engine_kwargs)
        return self._async_engine

    def get_async_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create async session factory."""
        if self._async_session_factory is None:
            self._async_session_factory = async_sessionmaker(
                bind=self.get_async_engine(),
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=True,
            )
        return self._async_session_factory

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session with automatic cleanup."""
        session_factory = self.get_async_session_factory()
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create all tables known to the metadata."""
        # Register models on the metadata
        from .models import quota_models  # noqa: F401

        async with self.get_async_engine().begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

    async def health_check(self) -> Dict[str, Any]:
        """Check database connection health."""
        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1 as health_check"))
                row = result.fetchone()

                if row and row[0] == 1:
                    return {
                        "status": "healthy",
                        "database_url": self._mask_credentials(self.config.database_url),
                    }
                return {
                    "status": "unhealthy",
                    "error": "Health check query failed",
                    "database_url": self._mask_credentials(self.config.database_url),
                }
        except Exception as e:
            return {
                "status": "unhealthy",
                "error": str(e),
                "database_url": self._mask_credentials(self.config.database_url),
            }

    def _mask_credentials(self, url: str) -> str:
        """Mask credentials in database URL for logging."""
        if "@" in url and "://" in url:
            protocol, rest = url.split("://", 1)
            if "@" in rest:
                _, server = rest.split("@", 1)
                return f"{protocol}://***:***@{server}"
        return url

    async def close(self) -> None:
        """Close all database connections."""
        if self._async_engine:
            await self._async_engine.dispose()
            self._async_engine = None
            self._async_session_factory = None


# Session factory type for dependency injection
SessionFactory = async_sessionmaker[AsyncSession]
