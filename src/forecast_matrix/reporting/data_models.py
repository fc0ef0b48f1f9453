from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PerformanceReport:
    """How much a filter narrowed a matrix, for observability panels."""

    original_data_points: int
    filtered_data_points: int
    original_populated_cells: int  # cells with at least one task
    filtered_populated_cells: int
    data_point_reduction_percent: float
    populated_cell_reduction_percent: float
    original_total_demand: float
    filtered_total_demand: float
    demand_reduction_percent: float
    original_total_tasks: int
    filtered_total_tasks: int
    active_filters: tuple[str, ...]
