"""Shared paths for the smoke tests (imports and type checking)."""

from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parent.parent
PACKAGE_DIR = PROJECT_ROOT / "src" / "rabbitmq_messaging"


@pytest.fixture(scope="session")
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def package_dir() -> Path:
    if not PACKAGE_DIR.exists():
        pytest.skip(f"Package directory not found: {PACKAGE_DIR}")
    return PACKAGE_DIR
