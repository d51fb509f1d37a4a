"""Test package. Points the app at an in-memory database before anything imports it."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("JWT_SECRET", "test-secret-that-is-at-least-32-bytes-long")
os.environ.setdefault("USER_PASSWORD_HASH_SECRET", "test-password-hash-secret")
