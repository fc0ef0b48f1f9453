from __future__ import annotations

import pytest

from forecast_matrix.data_models import FilterConfig, ValidationResult
from forecast_matrix.filtering import apply_filter
from forecast_matrix.records import StaffCapacityRecord, TaskRecord
from forecast_matrix.reporting.performance import performance_report
from forecast_matrix.reporting.text_report import (
    format_matrix_summary,
    format_validation,
    render_text_report,
)
from forecast_matrix.transformer import build_matrix
from forecast_matrix.validation import validate


@pytest.fixture
def matrix(tasks, clients, staff, year_2025):
    return build_matrix(tasks, clients, staff, year_2025)


def test_format_validation_lists_errors_and_warnings():
    text = format_validation(
        ValidationResult(is_valid=False, errors=("bad cell",), warnings=("odd",))
    )
    assert text.splitlines()[0] == "Matrix validation: INVALID (1 error(s), 1 warning(s))"
    assert "  - bad cell" in text
    assert "  - odd" in text


def test_matrix_summary_table(matrix):
    text = format_matrix_summary(matrix)
    assert "Months: 12 | skills: 3 | cells: 36" in text
    assert "Junior Staff" in text
    assert "short of capacity" not in text


def test_matrix_summary_flags_shortages(clients, year_2025):
    task = TaskRecord("t1", "c1", "Big job", 100, ["CPA"], "Monthly")
    matrix = build_matrix([task], clients, [StaffCapacityRecord("s1", ["CPA"], 5)], year_2025)
    assert "Skills short of capacity: CPA" in format_matrix_summary(matrix)


def test_render_text_report_prints_all_sections(capsys, matrix):
    config = FilterConfig(selected_clients=("c2",))
    perf = performance_report(matrix, apply_filter(matrix, config), config)
    render_text_report(matrix, validation=validate(matrix), performance=perf)

    out = capsys.readouterr().out
    assert "Total demand:" in out
    assert "Active filters: clients: c2" in out
    assert "Matrix validation: VALID" in out
