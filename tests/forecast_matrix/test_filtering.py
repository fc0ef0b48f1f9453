from __future__ import annotations

from dataclasses import replace

import pytest

from forecast_matrix.data_models import (
    FilterConfig,
    MonthRange,
    PreferredStaffMode,
)
from forecast_matrix.filtering import apply_filter
from forecast_matrix.transformer import build_matrix


@pytest.fixture
def matrix(tasks, clients, staff, year_2025):
    return build_matrix(tasks, clients, staff, year_2025)


CONFIGS = [
    FilterConfig(),
    FilterConfig(selected_skills=("CPA", "Junior Staff")),
    FilterConfig(selected_clients=("c2",)),
    FilterConfig(preferred_staff_filter_mode="specific", selected_preferred_staff=("s1",)),
    FilterConfig(preferred_staff_filter_mode="specific"),
    FilterConfig(preferred_staff_filter_mode="none"),
    FilterConfig(month_range=MonthRange(start=2, end=4)),
    FilterConfig(month_range=MonthRange(start=9, end=3)),
    FilterConfig(
        selected_skills=("Senior Staff",),
        selected_clients=("c1",),
        month_range=MonthRange(start=6),
    ),
]


@pytest.mark.parametrize("config", CONFIGS)
def test_filter_is_idempotent(matrix, config):
    once = apply_filter(matrix, config)
    assert apply_filter(once, config) == once


@pytest.mark.parametrize("config", CONFIGS)
def test_filter_output_is_dense_and_bottom_up(matrix, config):
    out = apply_filter(matrix, config)
    assert len(out.data_points) == len(out.skills) * len(out.months)
    for p in out.data_points:
        assert p.demand_hours == pytest.approx(sum(e.monthly_hours for e in p.task_breakdown))
        assert p.task_count == len(p.task_breakdown)
    assert out.total_tasks == sum(p.task_count for p in out.data_points)


def test_filter_never_aliases_input(matrix):
    before = apply_filter(matrix, FilterConfig())
    out = apply_filter(matrix, FilterConfig())

    assert out is not matrix
    assert out.data_points is not matrix.data_points
    assert out.skill_summary is not matrix.skill_summary
    assert all(a is not b for a, b in zip(out.data_points, matrix.data_points))

    out.skill_summary.clear()
    out.staff_summary.clear()
    assert apply_filter(matrix, FilterConfig()) == before
    assert matrix.skill_summary


def test_specific_mode_with_empty_selection_matches_nothing(matrix):
    out = apply_filter(matrix, FilterConfig(preferred_staff_filter_mode="specific"))
    assert out.total_tasks == 0
    assert out.total_demand == 0
    assert len(out.data_points) == 36


def test_specific_mode_compares_normalized_ids(matrix):
    out = apply_filter(
        matrix,
        FilterConfig(
            preferred_staff_filter_mode=PreferredStaffMode.SPECIFIC,
            selected_preferred_staff=(" S1", "s2"),
        ),
    )
    ids = {e.recurring_task_id for p in out.data_points for e in p.task_breakdown}
    assert ids == {"t1", "t3"}


def test_none_mode_keeps_only_unassigned_tasks(matrix):
    out = apply_filter(matrix, FilterConfig(preferred_staff_filter_mode="none"))
    ids = {e.recurring_task_id for p in out.data_points for e in p.task_breakdown}
    assert ids == {"t2"}
    assert out.total_demand == pytest.approx(12 * 8.66)


def test_all_mode_with_no_selection_keeps_everything(matrix):
    out = apply_filter(matrix, FilterConfig())
    assert out.total_demand == pytest.approx(matrix.total_demand)
    assert out.total_tasks == matrix.total_tasks
    assert FilterConfig().is_noop(matrix)


def test_skill_filter_narrows_declared_skills(matrix):
    out = apply_filter(matrix, FilterConfig(selected_skills=("CPA", "Tax")))
    assert out.skills == ("CPA",)
    assert len(out.data_points) == 12
    assert out.total_demand == pytest.approx(24)
    assert set(out.skill_summary) == {"CPA"}


def test_client_filter_keeps_zero_cells(matrix):
    out = apply_filter(matrix, FilterConfig(selected_clients=("c2",)))
    assert out.skills == matrix.skills
    assert len(out.data_points) == 36
    assert out.total_clients == 1
    assert out.total_demand == pytest.approx(24)
    assert out.cell("Junior Staff", "2025-01").task_count == 0


def test_month_range_is_inclusive_and_zero_indexed(matrix):
    out = apply_filter(matrix, FilterConfig(month_range=MonthRange(start=2, end=4)))
    assert [m.key for m in out.months] == ["2025-03", "2025-04", "2025-05"]
    assert len(out.data_points) == 9
    assert out.horizon == matrix.months
    assert len(out.capacity) == 9


def test_month_range_clamps_out_of_range_indices(matrix):
    out = apply_filter(matrix, FilterConfig(month_range=MonthRange(start=-4, end=99)))
    assert out.months == matrix.months
    tail = apply_filter(matrix, FilterConfig(month_range=MonthRange(start=10)))
    assert [m.key for m in tail.months] == ["2025-11", "2025-12"]


def test_end_before_start_gives_empty_window(matrix):
    out = apply_filter(matrix, FilterConfig(month_range=MonthRange(start=9, end=3)))
    assert out.months == ()
    assert out.data_points == ()
    assert out.total_demand == 0


def test_refiltering_uses_original_month_indices(matrix):
    first = apply_filter(matrix, FilterConfig(month_range=MonthRange(start=0, end=5)))
    second = apply_filter(first, FilterConfig(month_range=MonthRange(start=3, end=8)))
    assert [m.key for m in second.months] == ["2025-04", "2025-05", "2025-06"]


def test_stored_aggregates_are_not_trusted(matrix):
    tampered = replace(
        matrix,
        data_points=tuple(replace(p, demand_hours=999.0) for p in matrix.data_points),
        total_demand=-1.0,
    )
    out = apply_filter(tampered, FilterConfig())
    assert out.total_demand == pytest.approx(matrix.total_demand)


def test_filter_rejects_wrong_types(matrix):
    with pytest.raises(TypeError):
        apply_filter({"months": []}, FilterConfig())
    with pytest.raises(TypeError):
        apply_filter(matrix, {"selected_skills": []})


def test_filter_config_rejects_plain_string_selection():
    with pytest.raises(TypeError):
        FilterConfig(selected_skills="CPA")


def test_cache_token_ignores_selection_order():
    a = FilterConfig(selected_skills=("b", "a"), month_range=MonthRange(1, 3))
    b = FilterConfig(selected_skills=("a", "b"), month_range=MonthRange(1, 3))
    assert a.cache_token() == b.cache_token()
    assert a.cache_token() != FilterConfig(selected_skills=("a",)).cache_token()


def test_is_noop_detects_restrictions(matrix):
    assert not FilterConfig(selected_skills=("CPA",)).is_noop(matrix)
    assert not FilterConfig(month_range=MonthRange(end=3)).is_noop(matrix)
    assert not FilterConfig(preferred_staff_filter_mode="none").is_noop(matrix)
    assert FilterConfig(selected_clients=("c1", "c2")).is_noop(matrix)


def test_filter_keeps_source_scope(matrix):
    scoped = replace(matrix, scope="c2")
    assert apply_filter(scoped, FilterConfig(selected_skills=("CPA",))).scope == "c2"
    assert apply_filter(matrix, FilterConfig()).scope == "all"
