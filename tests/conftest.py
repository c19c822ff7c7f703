"""
Pytest configuration and fixtures for client-ingest tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import itertools
import logging
import os
from datetime import date
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import MagicMock
from uuid import UUID

import pytest

from src.core.models import ClientRecord
from src.warehouse.repository import InMemoryClientRepository


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )


# =======================
# LOGGING / ID FIXTURES
# =======================

@pytest.fixture
def logger() -> MagicMock:
    """
    Logger double; assertions inspect warning/error/info calls.
    """
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic guid generator: UUID(int=1), UUID(int=2), ..."""
    counter = itertools.count(1)
    return lambda: str(UUID(int=next(counter)))


# =======================
# RECORD FIXTURES
# =======================

@pytest.fixture
def make_record() -> Callable[..., ClientRecord]:
    """
    Factory for valid ClientRecords; keyword arguments override defaults.
    """
    def _make(dni: int = 12345678, **overrides) -> ClientRecord:
        values = {
            "guid": str(UUID(int=dni)),
            "full_name": "Juan Perez",
            "dni": dni,
            "status": "ACTIVO",
            "ingress_at": date(2023, 11, 15),
            "is_pep": True,
            "is_obligate_subject": None,
        }
        values.update(overrides)
        return ClientRecord(**values)

    return _make


@pytest.fixture
def memory_repository() -> InMemoryClientRepository:
    return InMemoryClientRepository()


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture
def write_client_file(tmp_path) -> Callable[[str, str], Path]:
    """
    Write text to a file under tmp_path and return its path.
    """
    def _write(content: str, name: str = "CLIENTES_IN_TEST.dat") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture(scope="session")
def test_data_dir() -> Path:
    """Path to tests/fixtures directory"""
    return Path(__file__).parent / "fixtures"


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container():
    """
    Start PostgreSQL container with the clients table.

    Skips the requesting tests when Docker is not available.
    """
    try:
        from testcontainers.postgres import PostgresContainer
        container = PostgresContainer(
            image="postgres:16.2-alpine",
            username="test_ingest",
            password="test_password",
            dbname="test_clients",
        )
        container.start()
    except Exception as e:
        pytest.skip(f"PostgreSQL container unavailable: {e}")

    try:
        init_sql_path = Path(__file__).parent.parent / "docker" / "init-db.sql"
        import psycopg
        with psycopg.connect(
            host=container.get_container_host_ip(),
            port=int(container.get_exposed_port(5432)),
            dbname="test_clients",
            user="test_ingest",
            password="test_password",
        ) as conn:
            with conn.cursor() as cur:
                cur.execute(init_sql_path.read_text())
            conn.commit()

        yield container
    finally:
        container.stop()


@pytest.fixture
def db_pool(postgres_container) -> Generator:
    """
    Open a DatabaseConnectionPool on an empty clients table.
    """
    from src.warehouse.connection import DatabaseConnectionPool

    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_clients",
        user="test_ingest",
        password="test_password",
    )
    pool.open()
    pool.execute_command("TRUNCATE TABLE clients RESTART IDENTITY")

    try:
        yield pool
    finally:
        pool.close()


@pytest.fixture(autouse=True)
def isolated_ingest_env(monkeypatch):
    """Keep INGEST_* variables of the host from leaking into tests."""
    for name in list(os.environ):
        if name.startswith("INGEST_"):
            monkeypatch.delenv(name, raising=False)
