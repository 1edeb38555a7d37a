"""Test environment: settings must not point at a real database or seed on import."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_ADMIN_ON_STARTUP", "false")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-bytes!")
