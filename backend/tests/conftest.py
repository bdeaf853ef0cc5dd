"""Root conftest — shared test configuration."""

import os

# Ensure tests don't accidentally use real API keys or databases
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-placeholder")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
