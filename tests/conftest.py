"""Shared test fixtures for the batch generator tests.

Templates live in ``data/templates`` and are read as raw bytes, exactly as
an upload would deliver them.
"""

from __future__ import annotations

import random
from datetime import datetime
from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from batchgen.main import app
from batchgen.services.delivery.store import clear_archives

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "data" / "templates"

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, 678000)


def read_template(name: str) -> bytes:
    return (TEMPLATE_DIR / name).read_bytes()


@pytest.fixture
def template_bytes() -> Callable[[str], bytes]:
    """Loader for a named template under data/templates."""
    return read_template


@pytest.fixture
def pain001_bytes() -> bytes:
    return read_template("pain.001.001.03.xml")


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """A clock frozen at ``FIXED_NOW``."""
    return lambda: FIXED_NOW


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(42)


@pytest.fixture(autouse=True)
def _clear_archive_store():
    """Reset the in-memory archive store between tests."""
    clear_archives()
    yield
    clear_archives()


@pytest.fixture(scope="function")
def client():
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c
