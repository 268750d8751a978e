"""Pytest configuration and fixtures for schema package tests."""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

packages_dir = Path(__file__).parent.parent.parent
for package in ("common", "config", "schema"):
    src_path = packages_dir / package / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))

from docknobs_common.events import InMemoryEventBus  # noqa: E402
from docknobs_schema import MemoryDocumentStore, field, schema  # noqa: E402


@pytest.fixture
def store():
    """Empty in-memory document store."""
    return MemoryDocumentStore()


@pytest_asyncio.fixture
async def event_bus():
    """Connected in-memory event bus."""
    bus = InMemoryEventBus()
    await bus.connect()
    yield bus
    await bus.close()


@pytest.fixture
def user_schema():
    """Schema for a user document with a nested address."""
    return schema({
        "name": field("name").string().trim().min_length(1),
        "email": field("email").string().email(),
        "age": field("age").integer().min(0).optional(),
        "address": field("address").object_of({
            "street": field("street").string().trim(),
            "city": field("city").string(),
        }).optional(),
        "tags": field("tags").array_of(field("tag").string()).default(list),
    })


@pytest.fixture
def sample_user():
    """Valid user document as supplied by a caller."""
    return {
        "name": " Ada ",
        "email": "ADA@example.org",
        "age": 36,
        "address": {"street": " 1 Main St ", "city": "London"},
    }
