"""
PostgreSQL connection pool for the client store, using psycopg3.

Connection settings come from explicit arguments or the DB_* environment
variables; the pool hands out dict-row connections.
"""
import os
import time
from contextlib import contextmanager
from typing import Iterator, Sequence

from psycopg import Connection, OperationalError
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool
from pydantic import BaseModel, Field, field_validator

from src.core.errors import ConfigurationError


class DatabaseSettings(BaseModel):
    """
    Connection settings of the client store.

    Attributes:
        host: Database host
        port: Database port
        database: Database name
        user: Database user
        password: Database password (required)
        connect_timeout: Seconds to wait for a new connection
    """

    host: str = "localhost"
    port: int = Field(5432, ge=1, le=65535)
    database: str = "clients"
    user: str = "ingest"
    password: str
    connect_timeout: int = Field(30, ge=1)

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("password must not be empty")
        return v

    class Config:
        frozen = True

    @classmethod
    def from_env(cls, **overrides) -> "DatabaseSettings":
        """
        Read DB_HOST, DB_PORT, DB_NAME, DB_USER and DB_PASSWORD.

        Non-None keyword overrides win over the environment.

        Raises:
            ConfigurationError: If the password is missing or a value is invalid
        """
        env = {
            "host": os.getenv("DB_HOST"),
            "port": os.getenv("DB_PORT"),
            "database": os.getenv("DB_NAME"),
            "user": os.getenv("DB_USER"),
            "password": os.getenv("DB_PASSWORD"),
        }
        env.update({k: v for k, v in overrides.items() if v is not None})
        values = {k: v for k, v in env.items() if v is not None and v != ""}

        if "password" not in values:
            raise ConfigurationError(
                "Database password must be provided. "
                "Set DB_PASSWORD environment variable or pass it explicitly."
            )

        try:
            return cls(**values)
        except ValueError as e:
            raise ConfigurationError(f"Invalid database settings: {e}") from e

    @property
    def conninfo(self) -> str:
        return make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=self.password,
            connect_timeout=self.connect_timeout,
        )


class DatabaseConnectionPool:
    """
    Pooled access to the client store.

    Usage:
        with DatabaseConnectionPool(password="secret") as pool:
            rows = pool.execute_query("SELECT COUNT(*) AS count FROM clients")
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        min_size: int = 1,
        max_size: int = 4,
        settings: DatabaseSettings | None = None,
    ) -> None:
        """
        Initialize the pool; no connection is made until open().

        Args:
            host: Database host (defaults to env var DB_HOST)
            port: Database port (defaults to env var DB_PORT)
            database: Database name (defaults to env var DB_NAME)
            user: Database user (defaults to env var DB_USER)
            password: Database password (defaults to env var DB_PASSWORD)
            min_size: Connections kept open
            max_size: Upper bound of concurrent connections
            settings: Ready-made settings; the other connection arguments are ignored

        Raises:
            ConfigurationError: If no password is available
        """
        self.settings = settings or DatabaseSettings.from_env(
            host=host, port=port, database=database, user=user, password=password
        )
        self.min_size = min_size
        self.max_size = max_size
        self._pool: ConnectionPool | None = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self, max_retries: int = 3, retry_delay: float = 2.0) -> None:
        """
        Open the pool, retrying while the database is not reachable yet.

        Args:
            max_retries: Connection attempts before giving up
            retry_delay: Seconds between attempts

        Raises:
            OperationalError: If every attempt fails
        """
        if self._pool is not None:
            return

        timeout = float(self.settings.connect_timeout)
        pool = ConnectionPool(
            conninfo=self.settings.conninfo,
            min_size=self.min_size,
            max_size=self.max_size,
            timeout=timeout,
            kwargs={"row_factory": dict_row},
            open=False,
        )

        for attempt in range(1, max_retries + 1):
            try:
                pool.open(wait=True, timeout=timeout)
                self._pool = pool
                return
            except (OperationalError, TimeoutError) as e:
                if attempt < max_retries:
                    time.sleep(retry_delay)
                else:
                    pool.close()
                    raise OperationalError(
                        f"Failed to connect to {self.settings.host}:{self.settings.port} "
                        f"after {max_retries} attempts: {e}"
                    ) from e

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def get_connection(self) -> Iterator[Connection]:
        """
        Borrow a connection.

        The transaction commits when the block exits normally and rolls back
        when it raises.

        Raises:
            RuntimeError: If the pool is not open
        """
        if self._pool is None:
            raise RuntimeError("Connection pool is not open. Call open() first.")

        with self._pool.connection() as conn:
            yield conn

    def execute_query(self, query: str, params: Sequence | None = None) -> list[dict]:
        """Run a SELECT and return its rows as dictionaries."""
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                return cur.fetchall()

    def execute_command(self, command: str, params: Sequence | None = None) -> int:
        """
        Run one INSERT/UPDATE/DELETE in its own transaction.

        Returns:
            Number of rows affected
        """
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(command, params)
                return cur.rowcount

    def execute_batch(self, command: str, params_list: Sequence[Sequence]) -> None:
        """
        Run a command once per parameter set, all in one transaction.

        Any failure rolls back every row of the batch.
        """
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.executemany(command, params_list)

    def __enter__(self) -> "DatabaseConnectionPool":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
