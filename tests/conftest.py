# tests/conftest.py
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from coopassign.snapshot import RuleContext


# -----------------------------
# Path helpers
# -----------------------------
@pytest.fixture(scope="session")
def project_root() -> Path:
    """Repository root (where pyproject.toml lives)."""
    return Path(__file__).resolve().parents[1]


# -----------------------------
# Evaluation context
# -----------------------------
@pytest.fixture
def ctx() -> RuleContext:
    """Fixed tenant, actor and clock so detected_at is stable across runs."""
    return RuleContext(
        tenant_id="league-1",
        actor_id="admin",
        timestamp=datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc),
    )
