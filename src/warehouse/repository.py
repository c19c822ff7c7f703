"""
Storage interface consumed by the ingestion pipeline.

ClientRepository is the contract; InMemoryClientRepository is a
dependency-free implementation with the same dni uniqueness rule, used for
dry runs and tests.
"""

import threading
from typing import Iterable, Protocol, Sequence, runtime_checkable

from src.core.errors import DuplicateKeyError
from src.core.models import ClientRecord


@runtime_checkable
class ClientRepository(Protocol):
    """
    Persistence operations needed by the pipeline.

    save_many must be all-or-nothing: on any error nothing is persisted and
    the error is raised. save raises DuplicateKeyError when the dni is
    already stored.
    """

    def find_existing_dnis(self, dnis: Sequence[int]) -> list[int]:
        """Return the subset of ``dnis`` already persisted."""
        ...

    def save_many(self, records: Sequence[ClientRecord]) -> None:
        """Persist all records in one operation."""
        ...

    def save(self, record: ClientRecord) -> None:
        """Persist a single record."""
        ...


class InMemoryClientRepository:
    """
    Thread-safe in-memory client store keyed by dni.
    """

    def __init__(
        self,
        records: Iterable[ClientRecord] = (),
        existing_dnis: Iterable[int] = (),
    ):
        """
        Initialize the store.

        Args:
            records: Records already persisted
            existing_dnis: Keys already persisted whose records are not needed
        """
        self._lock = threading.Lock()
        self._by_dni: dict[int, ClientRecord] = {}
        self._preloaded: set[int] = set(existing_dnis)
        for record in records:
            self._by_dni[record.dni] = record

    def _exists(self, dni: int) -> bool:
        return dni in self._by_dni or dni in self._preloaded

    def find_existing_dnis(self, dnis: Sequence[int]) -> list[int]:
        with self._lock:
            return [dni for dni in dict.fromkeys(dnis) if self._exists(dni)]

    def save_many(self, records: Sequence[ClientRecord]) -> None:
        with self._lock:
            seen: set[int] = set()
            for record in records:
                if self._exists(record.dni) or record.dni in seen:
                    raise DuplicateKeyError(record.dni)
                seen.add(record.dni)
            for record in records:
                self._by_dni[record.dni] = record

    def save(self, record: ClientRecord) -> None:
        with self._lock:
            if self._exists(record.dni):
                raise DuplicateKeyError(record.dni)
            self._by_dni[record.dni] = record

    @property
    def records(self) -> list[ClientRecord]:
        """Persisted records in insertion order."""
        with self._lock:
            return list(self._by_dni.values())

    def get(self, dni: int) -> ClientRecord | None:
        with self._lock:
            return self._by_dni.get(dni)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_dni)
