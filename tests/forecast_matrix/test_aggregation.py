from __future__ import annotations

import pytest

from forecast_matrix.aggregation import assemble_matrix, fill, make_cell
from forecast_matrix.data_models import (
    ClientTaskDemand,
    MatrixData,
    MonthInfo,
    RecurrencePattern,
)

JAN = MonthInfo(key="2025-01", label="Jan 2025")
FEB = MonthInfo(key="2025-02", label="Feb 2025")
MAR = MonthInfo(key="2025-03", label="Mar 2025")


def entry(client: str, hours: float, skill: str = "A", staff=None) -> ClientTaskDemand:
    return ClientTaskDemand(
        client_id=client,
        client_name=client.upper(),
        recurring_task_id=f"{client}-{hours}",
        task_name="task",
        skill_type=skill,
        estimated_hours=hours,
        recurrence_pattern=RecurrencePattern(type="Monthly", interval=1, frequency=1.0),
        monthly_hours=hours,
        preferred_staff_id=staff,
    )


def test_make_cell_derives_aggregates_from_breakdown():
    cell = make_cell("A", JAN, [entry("c1", 2.5), entry("c1", 1.0), entry("c2", 4.0)])
    assert cell.demand_hours == pytest.approx(7.5)
    assert cell.task_count == 3
    assert cell.client_count == 2
    assert cell.month == "2025-01"
    assert cell.month_label == "Jan 2025"


def test_fill_inserts_zero_cells_month_major():
    sparse = assemble_matrix(
        [JAN, FEB], ["A", "B"], [make_cell("B", FEB, [entry("c1", 3.0, "B")])]
    )
    dense = fill(sparse)

    assert [(p.month, p.skill_type) for p in dense.data_points] == [
        ("2025-01", "A"),
        ("2025-01", "B"),
        ("2025-02", "A"),
        ("2025-02", "B"),
    ]
    assert dense.cell("B", "2025-02").demand_hours == 3.0
    zero = dense.cell("A", "2025-01")
    assert (zero.demand_hours, zero.task_count, zero.client_count) == (0, 0, 0)
    assert zero.task_breakdown == ()


def test_fill_with_expected_axes_keeps_stray_cells_after_grid():
    sparse = assemble_matrix([JAN], ["A"], [make_cell("Z", JAN, [entry("c9", 1.0, "Z")])])
    dense = fill(sparse, expected_skills=["B", "A", "A"], expected_months=[FEB, JAN])

    assert dense.skills == ("A", "B")
    assert [m.key for m in dense.months] == ["2025-01", "2025-02"]
    assert len(dense.data_points) == 5
    assert dense.data_points[-1].skill_type == "Z"
    assert dense.total_demand == pytest.approx(1.0)


def test_fill_is_stable_on_dense_matrix():
    dense = fill(assemble_matrix([JAN, FEB, MAR], ["A"], []))
    assert fill(dense) == dense
    assert len(dense.data_points) == 3


def test_fill_rejects_non_matrix():
    with pytest.raises(TypeError):
        fill({"data_points": []})


def test_assemble_recomputes_totals_and_summaries():
    cells = [
        make_cell("A", JAN, [entry("c1", 2.0, staff="s1"), entry("c2", 3.0)]),
        make_cell("B", JAN, [entry("c1", 5.0, "B", staff="S1 ")]),
    ]
    matrix = assemble_matrix([JAN], ["A", "B"], cells)

    assert isinstance(matrix, MatrixData)
    assert matrix.total_demand == pytest.approx(10.0)
    assert matrix.total_tasks == 3
    assert matrix.total_clients == 2
    assert matrix.skill_summary["A"].total_hours == pytest.approx(5.0)
    assert matrix.skill_summary["B"].client_count == 1

    s1 = matrix.staff_summary["s1"]
    assert s1.total_hours == pytest.approx(7.0)
    assert s1.task_count == 2
    unassigned = matrix.staff_summary["unassigned"]
    assert unassigned.staff_name == "Unassigned"
    assert unassigned.total_hours == pytest.approx(3.0)


def test_empty_skill_still_gets_a_summary_entry():
    matrix = assemble_matrix([JAN], ["A", "B"], [])
    assert matrix.skill_summary["B"].total_hours == 0
    assert matrix.skill_summary["B"].task_count == 0
