"""Root conftest — shared test configuration."""

import os

# Tests never reach a real database or start the background sweep loop
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("RETIREMENT_SWEEP_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
