from __future__ import annotations

from .reporter import Reporter
from .text_report import metrics_frame, render_text_report, violations_frame

__all__ = [
    "Reporter",
    "render_text_report",
    "violations_frame",
    "metrics_frame",
]
