from __future__ import annotations

from datetime import date

import pytest

from forecast_matrix.config import Config
from forecast_matrix.observers import RecordingObserver
from forecast_matrix.records import TaskRecord
from forecast_matrix.recurrence import (
    canonical_type,
    describe_recurrence,
    monthly_hours,
    occurrences_per_month,
    recurrence_pattern,
)


def make_task(**overrides) -> TaskRecord:
    fields = dict(
        id="t",
        client_id="c",
        name="Task",
        estimated_hours=10,
        required_skills=["Junior Staff"],
        recurrence_type="Monthly",
        recurrence_interval=1,
    )
    fields.update(overrides)
    return TaskRecord(**fields)


@pytest.mark.parametrize("month", ["2025-01", date(2025, 7, 1), None])
def test_monthly_task_contributes_its_hours_every_month(month):
    assert monthly_hours(make_task(), month) == pytest.approx(10.0)


def test_weekly_task_uses_calendar_average():
    task = make_task(recurrence_type="Weekly")
    assert monthly_hours(task, "2025-02") == pytest.approx(43.3)


def test_weekly_interval_one_exceeds_interval_two():
    weekly = make_task(recurrence_type="Weekly", recurrence_interval=1)
    fortnightly = make_task(recurrence_type="Weekly", recurrence_interval=2)
    assert monthly_hours(weekly, "2025-01") > monthly_hours(fortnightly, "2025-01")


@pytest.mark.parametrize(
    "kind, interval, hours, expected",
    [
        ("Daily", 1, 2, 60.0),
        ("Daily", 3, 2, 20.0),
        ("Monthly", 2, 10, 5.0),
        ("Quarterly", 1, 6, 2.0),
        ("Annually", 1, 12, 1.0),
        ("Annually", 2, 12, 0.5),
        ("None", 1, 10, 0.0),
    ],
)
def test_frequency_table_without_anchors(kind, interval, hours, expected):
    task = make_task(
        recurrence_type=kind, recurrence_interval=interval, estimated_hours=hours
    )
    assert monthly_hours(task, "2025-05") == pytest.approx(expected)


@pytest.mark.parametrize("hours", [0, -3])
def test_non_positive_hours_give_zero_without_warning(hours):
    obs = RecordingObserver()
    assert monthly_hours(make_task(estimated_hours=hours), "2025-01", observer=obs) == 0
    assert obs.warnings == []


def test_non_numeric_hours_give_zero_with_warning():
    obs = RecordingObserver()
    task = make_task(estimated_hours=float("nan"))
    assert monthly_hours(task, "2025-01", observer=obs) == 0
    assert len(obs.warnings) == 1


def test_unknown_recurrence_type_is_zero_and_warns():
    obs = RecordingObserver()
    task = make_task(recurrence_type="Fortnightly-ish")
    assert monthly_hours(task, "2025-01", observer=obs) == 0
    assert len(obs.warnings) == 1
    assert "Fortnightly-ish" in obs.warnings[0]


def test_recurrence_types_match_case_insensitively():
    assert canonical_type(" weekly ") == "Weekly"
    assert canonical_type("ANNUAL") == "Annually"
    assert canonical_type(None) == "None"
    assert canonical_type(3) is None


@pytest.mark.parametrize("interval", [0, -2, 1.5, "x"])
def test_invalid_interval_falls_back_to_one(interval):
    obs = RecordingObserver()
    task = make_task(recurrence_interval=interval)
    assert monthly_hours(task, "2025-01", observer=obs) == pytest.approx(10.0)
    assert obs.warnings


def test_weekly_with_weekdays_counts_each_day():
    task = make_task(recurrence_type="Weekly", estimated_hours=1, weekdays=[0, 2, 4, 2])
    assert monthly_hours(task, "2025-01") == pytest.approx(3 * 30.44 / 7)


def test_weekly_with_only_invalid_weekdays_uses_average():
    obs = RecordingObserver()
    task = make_task(recurrence_type="Weekly", estimated_hours=1, weekdays=[9, "mon"])
    assert monthly_hours(task, "2025-01", observer=obs) == pytest.approx(4.33)
    assert len(obs.warnings) == 2


def test_annual_task_lands_in_its_anchor_month():
    task = make_task(recurrence_type="Annually", estimated_hours=12, month_of_year=3)
    assert monthly_hours(task, "2025-03") == pytest.approx(12.0)
    assert monthly_hours(task, "2025-04") == 0.0


def test_annual_task_uses_due_date_when_month_missing():
    task = make_task(
        recurrence_type="Annually", estimated_hours=8, due_date=date(2024, 11, 30)
    )
    assert monthly_hours(task, "2025-11") == pytest.approx(8.0)
    assert monthly_hours(task, "2025-10") == 0.0


def test_anchoring_can_be_switched_off():
    task = make_task(recurrence_type="Annually", estimated_hours=12, month_of_year=3)
    config = Config(ANCHOR_PERIODIC_TASKS=False)
    assert monthly_hours(task, "2025-04", config=config) == pytest.approx(1.0)


def test_quarterly_task_with_due_date_hits_every_third_month():
    task = make_task(
        recurrence_type="Quarterly", estimated_hours=3, due_date=date(2025, 1, 20)
    )
    hours = {m: monthly_hours(task, m) for m in ("2025-01", "2025-02", "2025-04", "2025-10")}
    assert hours == {"2025-01": 3.0, "2025-02": 0.0, "2025-04": 3.0, "2025-10": 3.0}


def test_quarterly_interval_two_skips_alternate_quarters():
    task = make_task(
        recurrence_type="Quarterly",
        estimated_hours=3,
        recurrence_interval=2,
        due_date=date(2025, 1, 1),
    )
    assert monthly_hours(task, "2025-01") == 3.0
    assert monthly_hours(task, "2025-04") == 0.0
    assert monthly_hours(task, "2025-07") == 3.0


def test_custom_passes_explicit_hours_through():
    task = make_task(recurrence_type="Custom", estimated_hours=2, custom_monthly_hours=7.5)
    assert monthly_hours(task, "2025-01") == pytest.approx(7.5)
    assert recurrence_pattern(task, "2025-01").frequency == pytest.approx(3.75)


def test_custom_without_hours_is_zero_and_warns():
    obs = RecordingObserver()
    task = make_task(recurrence_type="Custom")
    assert monthly_hours(task, "2025-01", observer=obs) == 0.0
    assert obs.warnings


def test_occurrences_for_unknown_type_are_zero():
    assert occurrences_per_month(make_task(recurrence_type="Sometimes")) == 0.0


def test_recurrence_pattern_carries_type_interval_and_frequency():
    pattern = recurrence_pattern(
        make_task(recurrence_type="weekly", recurrence_interval=2), "2025-01"
    )
    assert pattern.type == "Weekly"
    assert pattern.interval == 2
    assert pattern.frequency == pytest.approx(4.33 / 2)


@pytest.mark.parametrize(
    "overrides, text",
    [
        ({"recurrence_type": "Weekly", "recurrence_interval": 2}, "Every 2 weeks"),
        ({"recurrence_type": "Weekly", "weekdays": [2, 0]}, "Weekly on Mon, Wed"),
        ({"recurrence_type": "Monthly"}, "Monthly"),
        ({"recurrence_type": "Annually", "month_of_year": 2}, "Annually in February"),
        (
            {"recurrence_type": "Quarterly", "due_date": date(2025, 3, 31)},
            "Quarterly in March",
        ),
        ({"recurrence_type": "None"}, "Does not recur"),
        ({"recurrence_type": "Custom", "custom_monthly_hours": 4}, "Custom (4h per month)"),
    ],
)
def test_describe_recurrence(overrides, text):
    assert describe_recurrence(make_task(**overrides)) == text
