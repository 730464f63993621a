"""Root conftest — shared test configuration."""

import os

# Ensure tests never touch the default on-disk database
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("CREATE_SCHEMA_ON_STARTUP", "false")
