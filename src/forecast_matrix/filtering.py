from __future__ import annotations

from dataclasses import replace
from typing import Callable, Optional

from forecast_matrix.aggregation import assemble_matrix, fill
from forecast_matrix.config import Config
from forecast_matrix.data_models import (
    ClientTaskDemand,
    DemandDataPoint,
    FilterConfig,
    MatrixData,
    PreferredStaffMode,
)
from forecast_matrix.records import normalize_staff_id


def staff_predicate(
    filter_config: FilterConfig,
) -> Callable[[ClientTaskDemand], bool]:
    mode = filter_config.preferred_staff_filter_mode
    if mode is PreferredStaffMode.ALL:
        return lambda entry: True
    if mode is PreferredStaffMode.NONE:
        return lambda entry: normalize_staff_id(entry.preferred_staff_id) is None

    # An empty selection in "specific" mode matches nothing.
    wanted = {
        sid
        for sid in (normalize_staff_id(s) for s in filter_config.selected_preferred_staff)
        if sid is not None
    }
    return lambda entry: normalize_staff_id(entry.preferred_staff_id) in wanted


def apply_filter(
    matrix: MatrixData,
    filter_config: FilterConfig,
    *,
    config: Optional[Config] = None,
) -> MatrixData:
    """
    Return a new, dense matrix restricted by `filter_config`.

    Each kept cell is rebuilt from its filtered task breakdown and all totals
    are folded again from those cells. The input matrix is left untouched and
    shares no containers with the result.
    """
    if not isinstance(matrix, MatrixData):
        raise TypeError(f"apply_filter expects MatrixData, got {type(matrix).__name__}.")
    if not isinstance(filter_config, FilterConfig):
        raise TypeError(
            f"apply_filter expects FilterConfig, got {type(filter_config).__name__}."
        )

    selected_skills = set(filter_config.selected_skills)
    skills = [s for s in matrix.skills if not selected_skills or s in selected_skills]
    skill_set = set(skills)

    current = {m.key for m in matrix.months}
    window = [m for m in filter_config.month_range.window(matrix.horizon) if m.key in current]
    window_keys = {m.key for m in window}

    clients = set(filter_config.selected_clients)
    staff_ok = staff_predicate(filter_config)

    def keep(entry: ClientTaskDemand) -> bool:
        if clients and entry.client_id not in clients:
            return False
        return staff_ok(entry)

    points: list[DemandDataPoint] = []
    for p in matrix.data_points:
        if p.skill_type not in skill_set or p.month not in window_keys:
            continue
        breakdown = tuple(replace(e) for e in p.task_breakdown if keep(e))
        points.append(replace(p, task_breakdown=breakdown))

    capacity = tuple(
        replace(c)
        for c in matrix.capacity
        if c.skill_type in skill_set and c.month in window_keys
    )
    filtered = assemble_matrix(
        window,
        skills,
        points,
        capacity=capacity,
        horizon=matrix.horizon,
        scope=matrix.scope,
        config=config,
    )
    return fill(filtered, config=config)
