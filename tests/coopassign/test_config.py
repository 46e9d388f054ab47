from __future__ import annotations

import pytest

from coopassign.config import EngineConfig


def test_default_config_is_valid() -> None:
    EngineConfig().validate()


@pytest.mark.parametrize(
    "field, value",
    [
        ("DEFAULT_DURATION_MINUTES", 0),
        ("MIDDAY_MINUTES", 0),
        ("MIDDAY_MINUTES", 24 * 60),
        ("FAIRNESS_K", -0.5),
        ("FAIRNESS_MIN_GAP", -1),
        ("MAX_WORKERS", 0),
    ],
)
def test_validate_rejects_nonsense(field: str, value: float) -> None:
    cfg = EngineConfig()
    setattr(cfg, field, value)
    with pytest.raises(ValueError):
        cfg.validate()
