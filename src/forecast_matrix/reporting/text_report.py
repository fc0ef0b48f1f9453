from __future__ import annotations

from typing import Optional

import pandas as pd

from forecast_matrix.capacity import skill_gap_summary
from forecast_matrix.data_models import MatrixData, ValidationResult

from .data_models import PerformanceReport


def _fmt_float(x: float | None, nd: int = 1, as_pct: bool = False) -> str:
    if x is None or pd.isna(x):
        return "nan"
    return f"{float(x):,.{nd}f}%" if as_pct else f"{float(x):,.{nd}f}"


def format_validation(result: ValidationResult) -> str:
    status = "VALID" if result.is_valid else "INVALID"
    lines = [
        f"Matrix validation: {status} "
        f"({len(result.errors)} error(s), {len(result.warnings)} warning(s))"
    ]
    if result.errors:
        lines.append("Errors:")
        lines.extend(f"  - {e}" for e in result.errors)
    if result.warnings:
        lines.append("Warnings:")
        lines.extend(f"  - {w}" for w in result.warnings)
    return "\n".join(lines)


def format_performance(report: PerformanceReport) -> str:
    filters = ", ".join(report.active_filters) if report.active_filters else "none"
    return "\n".join(
        [
            f"Active filters: {filters}",
            f"Data points: {report.original_data_points:,} -> "
            f"{report.filtered_data_points:,} "
            f"({_fmt_float(report.data_point_reduction_percent, as_pct=True)} fewer)",
            f"Populated cells: {report.original_populated_cells:,} -> "
            f"{report.filtered_populated_cells:,} "
            f"({_fmt_float(report.populated_cell_reduction_percent, as_pct=True)} fewer)",
            f"Demand: {_fmt_float(report.original_total_demand)}h -> "
            f"{_fmt_float(report.filtered_total_demand)}h "
            f"({_fmt_float(report.demand_reduction_percent, as_pct=True)} less)",
            f"Tasks: {report.original_total_tasks:,} -> {report.filtered_total_tasks:,}",
        ]
    )


def format_matrix_summary(matrix: MatrixData, *, top: int = 10) -> str:
    """Totals plus a per-skill demand/capacity table, busiest skills first."""
    lines = [
        f"Months: {len(matrix.months)} | skills: {len(matrix.skills)} | "
        f"cells: {len(matrix.data_points)}",
        f"Total demand: {_fmt_float(matrix.total_demand)}h | "
        f"capacity: {_fmt_float(matrix.total_capacity)}h | "
        f"tasks: {matrix.total_tasks:,} | clients: {matrix.total_clients:,}",
    ]
    gaps = skill_gap_summary(matrix)
    if not gaps:
        lines.append("No skills in matrix.")
        return "\n".join(lines)

    df = pd.DataFrame(
        [
            {
                "skill": g.skill_type,
                "demand_h": round(g.demand_hours, 1),
                "capacity_h": round(g.capacity_hours, 1),
                "gap_h": round(g.gap, 1),
                "avg_util_%": round(g.average_utilization_percent, 1),
                "short_months": g.shortage_months,
            }
            for g in gaps.values()
        ]
    ).sort_values("demand_h", ascending=False)
    lines.append(f"\nPer-skill demand vs capacity (top {top}):")
    lines.append(df.head(top).to_string(index=False))
    short = df[df["gap_h"] < 0]
    if not short.empty:
        lines.append(
            "\n⚠️ Skills short of capacity: " + ", ".join(short["skill"].astype(str))
        )
    return "\n".join(lines)


def render_text_report(
    matrix: MatrixData,
    validation: Optional[ValidationResult] = None,
    performance: Optional[PerformanceReport] = None,
) -> None:
    print(format_matrix_summary(matrix))
    if performance is not None:
        print()
        print(format_performance(performance))
    if validation is not None:
        print()
        print(format_validation(validation))
