"""Root conftest — shared test configuration."""

import os

# Never touch a real database or start the in-process sweep from tests
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("VISIBILITY_SWEEP_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
