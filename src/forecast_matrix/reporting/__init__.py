from __future__ import annotations

from .data_models import PerformanceReport
from .frames import breakdown_frame, demand_pivot, gap_frame, matrix_frame
from .performance import describe_filters, performance_report
from .text_report import (
    format_matrix_summary,
    format_performance,
    format_validation,
    render_text_report,
)

__all__ = [
    "PerformanceReport",
    "performance_report",
    "describe_filters",
    "matrix_frame",
    "demand_pivot",
    "breakdown_frame",
    "gap_frame",
    "format_validation",
    "format_performance",
    "format_matrix_summary",
    "render_text_report",
]
