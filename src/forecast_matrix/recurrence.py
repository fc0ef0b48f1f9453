"""
Recurring task -> hours contributed to a calendar month.

monthly hours = estimated hours x occurrences per month, where the
occurrences per month follow from the recurrence type and interval:

    None       0
    Daily      30 / interval
    Weekly     4.33 / interval   (or weekdays x 30.44 / 7 / interval)
    Monthly    1 / interval
    Quarterly  (1/3) / interval  (or 1 in due months when anchored)
    Annually   (1/12) / interval (or 1/interval in the anchor month)
    Custom     the task's explicit monthly hours

Nothing in here raises for bad task data: the offending task contributes
zero hours and the observer receives a warning.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import Any, Optional

import numpy as np

from forecast_matrix.config import Config, cfg
from forecast_matrix.data_models import RecurrencePattern
from forecast_matrix.observers import MatrixObserver, NullObserver, resolve_observer
from forecast_matrix.periods import first_of_month, months_between, parse_month_key
from forecast_matrix.records import TaskRecord

RECURRENCE_TYPES = (
    "None",
    "Daily",
    "Weekly",
    "Monthly",
    "Quarterly",
    "Annually",
    "Custom",
)

_ALIASES = {t.lower(): t for t in RECURRENCE_TYPES}
_ALIASES["annual"] = "Annually"

_WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def canonical_type(raw: Any) -> Optional[str]:
    """Canonical recurrence type name, or None when `raw` is not recognised."""
    if raw is None:
        return "None"
    if not isinstance(raw, str):
        return None
    return _ALIASES.get(raw.strip().lower())


def _finite(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        return False
    return bool(np.isfinite(value))


def _reference(month: date | str | None) -> Optional[date]:
    if month is None:
        return None
    if isinstance(month, str):
        return parse_month_key(month)
    return first_of_month(month)


def _interval(task: TaskRecord, observer: MatrixObserver) -> int:
    raw = task.recurrence_interval
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        observer.warn(f"Task {task.id}: recurrence interval {raw!r} is not a number; using 1.")
        return 1
    if raw < 1 or not float(raw).is_integer():
        observer.warn(f"Task {task.id}: recurrence interval {raw!r} is invalid; using 1.")
        return 1
    return int(raw)


def _valid_weekdays(task: TaskRecord, observer: MatrixObserver) -> set[int]:
    days: set[int] = set()
    for d in task.weekdays or []:
        if isinstance(d, (int, np.integer)) and not isinstance(d, bool) and 0 <= d <= 6:
            days.add(int(d))
        else:
            observer.warn(f"Task {task.id}: ignoring invalid weekday {d!r}.")
    return days


def _annual_anchor(task: TaskRecord, observer: MatrixObserver) -> Optional[int]:
    moy = task.month_of_year
    if moy is not None:
        if isinstance(moy, int) and not isinstance(moy, bool) and 1 <= moy <= 12:
            return moy
        observer.warn(f"Task {task.id}: month_of_year {moy!r} is not within 1-12.")
    if task.due_date is not None:
        return task.due_date.month
    return None


def occurrences_per_month(
    task: TaskRecord,
    reference_month: date | str | None = None,
    *,
    config: Optional[Config] = None,
    observer: Optional[MatrixObserver] = None,
) -> float:
    """Occurrences of `task` in `reference_month` (0.0 for unknown types)."""
    C = config or cfg
    obs = resolve_observer(observer)
    kind = canonical_type(task.recurrence_type)

    if kind is None:
        obs.warn(
            f"Task {task.id}: unknown recurrence type {task.recurrence_type!r}; "
            "contributing 0 hours."
        )
        return 0.0
    if kind in ("None", "Custom"):
        return 0.0

    interval = _interval(task, obs)
    ref = _reference(reference_month)

    if kind == "Daily":
        return C.DAILY_OCCURRENCES_PER_MONTH / interval
    if kind == "Weekly":
        if task.weekdays:
            days = _valid_weekdays(task, obs)
            if days:
                return len(days) * C.DAYS_PER_MONTH / 7.0 / interval
        return C.WEEKLY_OCCURRENCES_PER_MONTH / interval
    if kind == "Monthly":
        return 1.0 / interval
    if kind == "Quarterly":
        if C.ANCHOR_PERIODIC_TASKS and task.due_date is not None and ref is not None:
            offset = months_between(first_of_month(task.due_date), ref)
            return 1.0 if offset % (3 * interval) == 0 else 0.0
        return (1.0 / 3.0) / interval
    # Annually
    if C.ANCHOR_PERIODIC_TASKS and ref is not None:
        anchor = _annual_anchor(task, obs)
        if anchor is not None:
            return 1.0 / interval if ref.month == anchor else 0.0
    return (1.0 / 12.0) / interval


def monthly_hours(
    task: TaskRecord,
    reference_month: date | str | None = None,
    *,
    config: Optional[Config] = None,
    observer: Optional[MatrixObserver] = None,
) -> float:
    """Hours `task` contributes to `reference_month`; never negative, never raises."""
    obs = resolve_observer(observer)
    kind = canonical_type(task.recurrence_type)

    if kind == "Custom":
        explicit = task.custom_monthly_hours
        if not _finite(explicit):
            obs.warn(f"Task {task.id}: Custom recurrence without monthly hours.")
            return 0.0
        return max(float(explicit), 0.0)

    hours = task.estimated_hours
    if not _finite(hours):
        obs.warn(f"Task {task.id}: estimated hours {hours!r} is not a number.")
        return 0.0
    if hours <= 0:
        return 0.0

    freq = occurrences_per_month(task, reference_month, config=config, observer=obs)
    return float(hours) * freq


def recurrence_pattern(
    task: TaskRecord,
    reference_month: date | str | None = None,
    *,
    config: Optional[Config] = None,
) -> RecurrencePattern:
    """Pattern carried on each breakdown entry. Silent: warnings come from monthly_hours."""
    kind = canonical_type(task.recurrence_type)
    interval = _interval(task, NullObserver())
    if kind == "Custom":
        est, explicit = task.estimated_hours, task.custom_monthly_hours
        ok = _finite(est) and _finite(explicit) and est > 0
        freq = max(float(explicit), 0.0) / est if ok else 0.0
    else:
        freq = occurrences_per_month(task, reference_month, config=config)
    return RecurrencePattern(
        type=kind or str(task.recurrence_type),
        interval=interval,
        frequency=freq,
    )


def _every(interval: int, singular: str, plural: str) -> str:
    return singular if interval == 1 else f"Every {interval} {plural}"


def describe_recurrence(task: TaskRecord) -> str:
    """Human readable recurrence, e.g. "Every 2 weeks" or "Annually in February"."""
    kind = canonical_type(task.recurrence_type)
    interval = _interval(task, NullObserver())

    if kind is None:
        return f"Unknown recurrence {task.recurrence_type!r}"
    if kind == "None":
        return "Does not recur"
    if kind == "Custom":
        hours = task.custom_monthly_hours or 0.0
        return f"Custom ({hours:g}h per month)"
    if kind == "Daily":
        return _every(interval, "Daily", "days")
    if kind == "Weekly":
        text = _every(interval, "Weekly", "weeks")
        days = sorted(
            {
                int(d)
                for d in task.weekdays or []
                if isinstance(d, int) and not isinstance(d, bool) and 0 <= d <= 6
            }
        )
        if days:
            text += " on " + ", ".join(_WEEKDAY_NAMES[d] for d in days)
        return text
    if kind == "Monthly":
        return _every(interval, "Monthly", "months")
    if kind == "Quarterly":
        text = _every(interval, "Quarterly", "quarters")
        if task.due_date is not None:
            text += f" in {calendar.month_name[task.due_date.month]}"
        return text
    text = _every(interval, "Annually", "years")
    moy = task.month_of_year
    if isinstance(moy, int) and not isinstance(moy, bool) and 1 <= moy <= 12:
        text += f" in {calendar.month_name[moy]}"
    elif task.due_date is not None:
        text += f" in {calendar.month_name[task.due_date.month]}"
    return text
