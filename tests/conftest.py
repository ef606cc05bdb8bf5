"""
Shared test fixtures and configuration for docstore tests.
"""
import itertools
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

from docstore import create_app
from docstore.config import TestConfig
from docstore.storage.database import Database


FAMILY = [
    {"name": "Alice", "age": 35, "relation": "mother", "occupation": "Teacher"},
    {"name": "Ben", "age": 37, "relation": "father", "occupation": "Engineer"},
    {"name": "Olivia", "age": 10, "relation": "daughter", "occupation": "Student"},
    {"name": "Liam", "age": 7, "relation": "son", "occupation": "Student"},
    {"name": "Max", "age": 4, "relation": "son", "occupation": "Preschooler"},
]


class CountingRandomSource:
    """Deterministic stand-in for the OS random source."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def token_bytes(self, nbytes: int) -> bytes:
        return next(self._counter).to_bytes(nbytes, "big")


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory for Database tests."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def database(temp_data_dir: Path) -> Database:
    """Create a Database instance with temporary directory."""
    return Database(temp_data_dir)


@pytest.fixture
def seeded_database(temp_data_dir: Path) -> Database:
    """Database whose ids come from a counter: 0000000000000001, 0000000000000002, ..."""
    return Database(temp_data_dir, random_source=CountingRandomSource())


@pytest.fixture
def family() -> list:
    """Fresh copies of the family documents (inserts mutate them)."""
    return [dict(member) for member in FAMILY]


@pytest.fixture
def app(temp_data_dir: Path) -> Flask:
    """Create and configure a test Flask application instance."""

    class _Config(TestConfig):
        DATA_DIR = temp_data_dir

    app = create_app(_Config)
    yield app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create a Flask test client."""
    return app.test_client()


@pytest.fixture
def counting_source():
    """Factory for deterministic random sources."""
    return CountingRandomSource
