"""
PostgreSQL implementation of the client repository.

Plain INSERTs (no ON CONFLICT): a repeated dni must surface as a uniqueness
violation so the committer can tell duplicates from other failures.
"""

from typing import Sequence
from uuid import UUID

from psycopg import errors as pg_errors

from src.core.errors import DuplicateKeyError
from src.core.models import ClientRecord

from .connection import DatabaseConnectionPool


INSERT_CLIENT = """
    INSERT INTO clients (
        guid, full_name, dni, status, ingress_at, is_pep, is_obligate_subject
    )
    VALUES (%s, %s, %s, %s, %s, %s, %s)
"""

SELECT_EXISTING_DNIS = """
    SELECT dni FROM clients
    WHERE dni = ANY(%s)
"""

DNI_CONSTRAINT_HINT = "dni"


class PostgresClientRepository:
    """
    Reads and writes the ``clients`` table through a DatabaseConnectionPool.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize repository.

        Args:
            pool: Open database connection pool
        """
        self.pool = pool

    def find_existing_dnis(self, dnis: Sequence[int]) -> list[int]:
        """
        Return the subset of ``dnis`` already stored.

        Args:
            dnis: Keys to look up

        Returns:
            Stored keys, each at most once
        """
        if not dnis:
            return []

        rows = self.pool.execute_query(SELECT_EXISTING_DNIS, (list(dict.fromkeys(dnis)),))
        return [int(row["dni"]) for row in rows]

    def save_many(self, records: Sequence[ClientRecord]) -> None:
        """
        Insert all records in a single transaction.

        Raises:
            psycopg.Error: On any failure; nothing is persisted
        """
        if not records:
            return

        self.pool.execute_batch(INSERT_CLIENT, [self._to_row(r) for r in records])

    def save(self, record: ClientRecord) -> None:
        """
        Insert one record.

        Raises:
            DuplicateKeyError: If the dni is already stored
            psycopg.Error: On any other failure
        """
        try:
            self.pool.execute_command(INSERT_CLIENT, self._to_row(record))
        except pg_errors.UniqueViolation as e:
            constraint = getattr(e.diag, "constraint_name", None) or ""
            if DNI_CONSTRAINT_HINT in constraint:
                raise DuplicateKeyError(record.dni, str(e).strip()) from e
            raise

    def count(self) -> int:
        rows = self.pool.execute_query("SELECT COUNT(*) AS count FROM clients")
        return int(rows[0]["count"]) if rows else 0

    @staticmethod
    def _to_row(record: ClientRecord) -> tuple:
        return (
            UUID(record.guid),
            record.full_name,
            record.dni,
            record.status,
            record.ingress_at,
            record.is_pep,
            record.is_obligate_subject,
        )
