"""Root conftest — shared test configuration."""

import os

# Never touch a real database, secret or Redis from tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-jwt-signing-only")
os.environ.setdefault("SEED_SYSTEM_CATEGORIES", "false")
os.environ.pop("REDIS_URL", None)
