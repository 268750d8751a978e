"""Pytest configuration and fixtures for config package tests."""

import shutil
import sys
import tempfile
from pathlib import Path

import pytest

packages_dir = Path(__file__).parent.parent.parent
for src_path in (packages_dir / "config" / "src", packages_dir / "common" / "src"):
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp = tempfile.mkdtemp()
    yield Path(temp)
    shutil.rmtree(temp)


@pytest.fixture
def sample_config_dict():
    """Sample schema configuration dictionary."""
    return {
        "name": "users",
        "fields": {
            "name": {"type": "string", "filters": ["trim"]},
            "email": {"type": "string", "filters": ["email"]},
        },
    }
