from __future__ import annotations

import pytest

from forecast_matrix.capacity import gap_analysis, skill_gap_summary, utilization_percent
from forecast_matrix.records import StaffCapacityRecord, TaskRecord
from forecast_matrix.transformer import build_matrix


@pytest.fixture
def matrix(tasks, clients, staff, year_2025):
    return build_matrix(tasks, clients, staff, year_2025)


def test_utilization_handles_zero_capacity():
    assert utilization_percent(50, 200) == pytest.approx(25.0)
    assert utilization_percent(5, 0) == 0.0


def test_gap_is_capacity_minus_demand(matrix):
    gaps = {(g.skill_type, g.month): g for g in gap_analysis(matrix)}
    assert len(gaps) == len(matrix.data_points)

    junior = gaps[("Junior Staff", "2025-01")]
    assert junior.demand_hours == pytest.approx(10)
    assert junior.capacity_hours == pytest.approx(40 * 4.33)
    assert junior.gap == pytest.approx(40 * 4.33 - 10)
    assert junior.utilization_percent == pytest.approx(10 / (40 * 4.33) * 100)


def test_shortage_is_negative_gap(clients, year_2025):
    task = TaskRecord("t1", "c1", "Big job", 100, ["CPA"], "Monthly")
    staff = [StaffCapacityRecord("s1", ["CPA"], 10)]
    matrix = build_matrix([task], clients, staff, year_2025)

    summary = skill_gap_summary(matrix)["CPA"]
    assert summary.shortage_months == 12
    assert summary.gap == pytest.approx(12 * (43.3 - 100))
    assert summary.average_utilization_percent == pytest.approx(100 / 43.3 * 100)


def test_summary_covers_every_declared_skill(matrix):
    summary = skill_gap_summary(matrix)
    assert set(summary) == set(matrix.skills)
    assert summary["Junior Staff"].shortage_months == 0


def test_gap_analysis_rejects_non_matrix():
    with pytest.raises(TypeError):
        gap_analysis([])
