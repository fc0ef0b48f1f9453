from __future__ import annotations

from forecast_matrix.data_models import (
    FilterConfig,
    MatrixData,
    PreferredStaffMode,
)

from .data_models import PerformanceReport


def _reduction(before: float, after: float) -> float:
    return (before - after) / before * 100.0 if before > 0 else 0.0


def describe_filters(config: FilterConfig) -> tuple[str, ...]:
    """Short labels for every restriction `config` applies."""
    active: list[str] = []
    if config.selected_skills:
        active.append("skills: " + ", ".join(config.selected_skills))
    if config.selected_clients:
        active.append("clients: " + ", ".join(config.selected_clients))
    mode = config.preferred_staff_filter_mode
    if mode is PreferredStaffMode.SPECIFIC:
        picked = ", ".join(config.selected_preferred_staff) or "(none selected)"
        active.append(f"preferred staff: {picked}")
    elif mode is PreferredStaffMode.NONE:
        active.append("preferred staff: unassigned only")
    rng = config.month_range
    if rng.start > 0 or rng.end is not None:
        end = "last" if rng.end is None else str(rng.end)
        active.append(f"months: {rng.start}..{end}")
    return tuple(active)


def performance_report(
    original: MatrixData, filtered: MatrixData, config: FilterConfig
) -> PerformanceReport:
    if not isinstance(original, MatrixData) or not isinstance(filtered, MatrixData):
        raise TypeError("performance_report expects two MatrixData instances.")
    orig_pop = sum(1 for p in original.data_points if p.task_count > 0)
    filt_pop = sum(1 for p in filtered.data_points if p.task_count > 0)
    return PerformanceReport(
        original_data_points=len(original.data_points),
        filtered_data_points=len(filtered.data_points),
        original_populated_cells=orig_pop,
        filtered_populated_cells=filt_pop,
        data_point_reduction_percent=_reduction(
            len(original.data_points), len(filtered.data_points)
        ),
        populated_cell_reduction_percent=_reduction(orig_pop, filt_pop),
        original_total_demand=original.total_demand,
        filtered_total_demand=filtered.total_demand,
        demand_reduction_percent=_reduction(
            original.total_demand, filtered.total_demand
        ),
        original_total_tasks=original.total_tasks,
        filtered_total_tasks=filtered.total_tasks,
        active_filters=describe_filters(config),
    )
