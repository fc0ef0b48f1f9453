from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from forecast_matrix.data_models import GapDataPoint, MatrixData


def utilization_percent(demand_hours: float, capacity_hours: float) -> float:
    return demand_hours / capacity_hours * 100.0 if capacity_hours > 0 else 0.0


def gap_analysis(matrix: MatrixData) -> tuple[GapDataPoint, ...]:
    """
    One gap record per demand cell, paired with the capacity cell of the same
    (skill, month). Gap is capacity minus demand, so shortages are negative.
    """
    if not isinstance(matrix, MatrixData):
        raise TypeError(f"gap_analysis expects MatrixData, got {type(matrix).__name__}.")
    capacity = {(c.skill_type, c.month): c.capacity_hours for c in matrix.capacity}
    out: list[GapDataPoint] = []
    for p in matrix.data_points:
        cap = capacity.get((p.skill_type, p.month), 0.0)
        out.append(
            GapDataPoint(
                skill_type=p.skill_type,
                month=p.month,
                month_label=p.month_label,
                demand_hours=p.demand_hours,
                capacity_hours=cap,
                gap=cap - p.demand_hours,
                utilization_percent=utilization_percent(p.demand_hours, cap),
            )
        )
    return tuple(out)


@dataclass(frozen=True)
class SkillGap:
    skill_type: str
    demand_hours: float
    capacity_hours: float
    gap: float
    average_utilization_percent: float
    shortage_months: int  # months where gap < 0


def skill_gap_summary(matrix: MatrixData) -> dict[str, SkillGap]:
    rows: dict[str, list[GapDataPoint]] = {s: [] for s in matrix.skills}
    for g in gap_analysis(matrix):
        rows.setdefault(g.skill_type, []).append(g)
    summary: dict[str, SkillGap] = {}
    for skill, gaps in rows.items():
        demand = float(sum(g.demand_hours for g in gaps))
        cap = float(sum(g.capacity_hours for g in gaps))
        util = (
            float(np.mean([g.utilization_percent for g in gaps])) if gaps else 0.0
        )
        summary[skill] = SkillGap(
            skill_type=skill,
            demand_hours=demand,
            capacity_hours=cap,
            gap=cap - demand,
            average_utilization_percent=util,
            shortage_months=sum(1 for g in gaps if g.gap < 0),
        )
    return summary
