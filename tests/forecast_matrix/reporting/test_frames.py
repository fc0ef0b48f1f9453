from __future__ import annotations

import pandas as pd
import pytest

from forecast_matrix.data_models import FilterConfig, MonthRange
from forecast_matrix.filtering import apply_filter
from forecast_matrix.reporting.frames import (
    BREAKDOWN_COLUMNS,
    CELL_COLUMNS,
    GAP_COLUMNS,
    breakdown_frame,
    demand_pivot,
    gap_frame,
    matrix_frame,
)
from forecast_matrix.transformer import build_matrix


@pytest.fixture
def matrix(tasks, clients, staff, year_2025):
    return build_matrix(tasks, clients, staff, year_2025)


def test_matrix_frame_has_one_row_per_cell(matrix):
    df = matrix_frame(matrix)
    assert list(df.columns) == CELL_COLUMNS
    assert len(df) == 36
    assert df["demand_hours"].sum() == pytest.approx(matrix.total_demand)


def test_demand_pivot_follows_matrix_axes(matrix):
    pivot = demand_pivot(matrix)
    assert list(pivot.index) == list(matrix.skills)
    assert list(pivot.columns) == matrix.month_keys
    assert pivot.loc["Junior Staff", "2025-07"] == pytest.approx(10)
    assert pivot.loc["CPA", "2025-02"] == pytest.approx(2)


def test_demand_pivot_of_empty_window(matrix):
    empty = apply_filter(matrix, FilterConfig(month_range=MonthRange(5, 1)))
    pivot = demand_pivot(empty)
    assert pivot.shape == (3, 0)


def test_breakdown_frame_rows_per_contribution(matrix):
    df = breakdown_frame(matrix)
    assert list(df.columns) == BREAKDOWN_COLUMNS
    assert len(df) == matrix.total_tasks
    assert set(df["recurring_task_id"]) == {"t1", "t2", "t3"}
    assert df.loc[df["recurring_task_id"] == "t2", "frequency"].iloc[0] == pytest.approx(4.33)


def test_gap_frame(matrix):
    df = gap_frame(matrix)
    assert list(df.columns) == GAP_COLUMNS
    assert isinstance(df, pd.DataFrame)
    assert (df["gap"] == df["capacity_hours"] - df["demand_hours"]).all()
