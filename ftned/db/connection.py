"""
FTNed jnode Database Connection Manager

SQLAlchemy engine over the jnode schema, for sqlite, mysql and postgres.
"""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional, Union

from sqlalchemy import create_engine, insert, text
from sqlalchemy.engine import Connection, Engine, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Executable
from sqlalchemy.sql.schema import Table

from ..errors import ConfigError, DatabaseConnectionError
from .schema import metadata

logger = logging.getLogger(__name__)

# Driver name -> SQLAlchemy URL scheme
DRIVER_SCHEMES = {
    "sqlite": "sqlite",
    "mysql": "mysql+pymysql",
    "postgres": "postgresql+psycopg2",
    "postgresql": "postgresql+psycopg2",
}

Statement = Union[str, Executable]


def build_url(driver: str, dsn: str) -> str:
    """
    Build an SQLAlchemy URL from a driver name and DSN.

    A DSN that already contains a scheme ("mysql+pymysql://...") is used
    unchanged. For sqlite the DSN is a file path or ":memory:".
    """
    scheme = DRIVER_SCHEMES.get(driver.lower())
    if scheme is None:
        raise ConfigError(f"Unsupported database driver: {driver}")

    if "://" in dsn:
        return dsn
    if scheme == "sqlite":
        return f"sqlite:///{dsn}"
    return f"{scheme}://{dsn}"


def _statement(sql: Statement) -> Executable:
    return text(sql) if isinstance(sql, str) else sql


class JnodeDatabase:
    """
    Connection manager for the jnode message database.

    Each helper runs in its own short transaction; use transaction()
    to group statements.
    """

    def __init__(
        self,
        driver: str = "sqlite",
        dsn: str = "jnode.db",
        max_open_conns: int = 25,
        max_idle_conns: int = 5,
        conn_max_lifetime: int = 300,
        auto_migrate: bool = False
    ):
        """
        Args:
            driver: sqlite | mysql | postgres
            dsn: Data source name (path for sqlite)
            max_open_conns: Pool size limit including overflow
            max_idle_conns: Connections kept open in the pool
            conn_max_lifetime: Seconds before a pooled connection is recycled
            auto_migrate: Create missing jnode tables on initialize()
        """
        self.driver = driver.lower()
        self.dsn = dsn
        self.max_open_conns = max_open_conns
        self.max_idle_conns = max_idle_conns
        self.conn_max_lifetime = conn_max_lifetime
        self.auto_migrate = auto_migrate
        self._engine: Optional[Engine] = None

    @classmethod
    def from_config(cls, config) -> "JnodeDatabase":
        """Create from a DatabaseConfig section."""
        return cls(
            driver=config.driver,
            dsn=config.dsn,
            max_open_conns=config.max_open_conns,
            max_idle_conns=config.max_idle_conns,
            conn_max_lifetime=config.conn_max_lifetime,
            auto_migrate=config.auto_migrate,
        )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database not initialized")
        return self._engine

    def initialize(self):
        """
        Create the engine and verify the connection.

        Raises:
            ConfigError: unsupported driver
            DatabaseConnectionError: database unreachable
        """
        url = build_url(self.driver, self.dsn)

        options: dict[str, Any] = {}
        if self.driver != "sqlite":
            options.update(
                pool_size=self.max_idle_conns,
                max_overflow=max(0, self.max_open_conns - self.max_idle_conns),
                pool_recycle=self.conn_max_lifetime,
                pool_pre_ping=True,
            )

        try:
            self._engine = create_engine(url, **options)
            self.health_check()
        except SQLAlchemyError as e:
            self._engine = None
            raise DatabaseConnectionError(f"Failed to connect to {self.driver} database: {e}") from e

        if self.auto_migrate:
            metadata.create_all(self._engine)

        logger.info(f"Connected to {self.driver} database successfully")

    @contextmanager
    def transaction(self) -> Generator[Connection, None, None]:
        """Context manager for database transactions."""
        with self.engine.begin() as conn:
            yield conn

    def execute(self, sql: Statement, params: Optional[dict] = None) -> int:
        """Execute a statement, returning the affected row count."""
        with self.engine.begin() as conn:
            return conn.execute(_statement(sql), params or {}).rowcount

    def fetchone(self, sql: Statement, params: Optional[dict] = None) -> Optional[RowMapping]:
        """Execute query and fetch one result."""
        with self.engine.connect() as conn:
            return conn.execute(_statement(sql), params or {}).mappings().first()

    def fetchall(self, sql: Statement, params: Optional[dict] = None) -> list[RowMapping]:
        """Execute query and fetch all results."""
        with self.engine.connect() as conn:
            return list(conn.execute(_statement(sql), params or {}).mappings().all())

    def insert(self, table: Table, values: dict) -> int:
        """Insert one row and return its primary key."""
        with self.engine.begin() as conn:
            result = conn.execute(insert(table).values(**values))
            return result.inserted_primary_key[0]

    def health_check(self):
        """Ping the database; raises SQLAlchemyError on failure."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def connection_stats(self) -> dict[str, Any]:
        """Connection pool statistics."""
        if self._engine is None:
            return {"error": "database connection is not initialized"}

        pool = self._engine.pool
        stats: dict[str, Any] = {"driver": self.driver, "pool": pool.status()}
        for name in ("size", "checkedin", "checkedout", "overflow"):
            method = getattr(pool, name, None)
            if callable(method):
                stats[name] = method()
        return stats

    def close(self):
        """Dispose of the connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database connection closed")
