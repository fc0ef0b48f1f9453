"""pandas views of a MatrixData for export and inspection."""

from __future__ import annotations

import pandas as pd

from forecast_matrix.capacity import gap_analysis
from forecast_matrix.data_models import MatrixData

CELL_COLUMNS = [
    "skill_type",
    "month",
    "month_label",
    "demand_hours",
    "task_count",
    "client_count",
]

BREAKDOWN_COLUMNS = [
    "skill_type",
    "month",
    "client_id",
    "client_name",
    "recurring_task_id",
    "task_name",
    "estimated_hours",
    "recurrence_type",
    "recurrence_interval",
    "frequency",
    "monthly_hours",
    "preferred_staff_id",
    "preferred_staff_name",
]

GAP_COLUMNS = [
    "skill_type",
    "month",
    "month_label",
    "demand_hours",
    "capacity_hours",
    "gap",
    "utilization_percent",
]


def matrix_frame(matrix: MatrixData) -> pd.DataFrame:
    """Long form: one row per cell."""
    rows = [
        {
            "skill_type": p.skill_type,
            "month": p.month,
            "month_label": p.month_label,
            "demand_hours": p.demand_hours,
            "task_count": p.task_count,
            "client_count": p.client_count,
        }
        for p in matrix.data_points
    ]
    return pd.DataFrame(rows, columns=CELL_COLUMNS)


def demand_pivot(matrix: MatrixData) -> pd.DataFrame:
    """Skills as rows, month keys as columns (in matrix order), hours as values."""
    df = matrix_frame(matrix)
    months = matrix.month_keys
    if df.empty:
        return pd.DataFrame(0.0, index=list(matrix.skills), columns=months)
    pivot = df.pivot_table(
        index="skill_type",
        columns="month",
        values="demand_hours",
        aggfunc="sum",
        fill_value=0.0,
    )
    pivot = pivot.reindex(index=list(matrix.skills), columns=months, fill_value=0.0)
    pivot.index.name = "skill_type"
    pivot.columns.name = "month"
    return pivot


def breakdown_frame(matrix: MatrixData) -> pd.DataFrame:
    """One row per task contribution to a cell."""
    rows = []
    for p in matrix.data_points:
        for e in p.task_breakdown:
            rows.append(
                {
                    "skill_type": p.skill_type,
                    "month": p.month,
                    "client_id": e.client_id,
                    "client_name": e.client_name,
                    "recurring_task_id": e.recurring_task_id,
                    "task_name": e.task_name,
                    "estimated_hours": e.estimated_hours,
                    "recurrence_type": e.recurrence_pattern.type,
                    "recurrence_interval": e.recurrence_pattern.interval,
                    "frequency": e.recurrence_pattern.frequency,
                    "monthly_hours": e.monthly_hours,
                    "preferred_staff_id": e.preferred_staff_id,
                    "preferred_staff_name": e.preferred_staff_name,
                }
            )
    return pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)


def gap_frame(matrix: MatrixData) -> pd.DataFrame:
    rows = [
        {
            "skill_type": g.skill_type,
            "month": g.month,
            "month_label": g.month_label,
            "demand_hours": g.demand_hours,
            "capacity_hours": g.capacity_hours,
            "gap": g.gap,
            "utilization_percent": g.utilization_percent,
        }
        for g in gap_analysis(matrix)
    ]
    return pd.DataFrame(rows, columns=GAP_COLUMNS)
