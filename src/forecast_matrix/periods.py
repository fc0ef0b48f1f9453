from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from forecast_matrix.config import Config, cfg
from forecast_matrix.data_models import MonthInfo


def first_of_month(value: date) -> date:
    if isinstance(value, datetime):
        value = value.date()
    return date(value.year, value.month, 1)


def add_months(value: date, n: int) -> date:
    idx = value.year * 12 + (value.month - 1) + n
    return date(idx // 12, idx % 12 + 1, 1)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from `start` to `end` (negative when end is earlier)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def month_sequence(start_month: date, end_month: date) -> list[date]:
    current = first_of_month(start_month)
    end = first_of_month(end_month)
    months: list[date] = []
    while current <= end:
        months.append(current)
        current = add_months(current, 1)
    return months


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def parse_month_key(key: str) -> date:
    """Parse a `YYYY-MM` key into the first day of that month."""
    try:
        year_s, month_s = key.split("-")
        return date(int(year_s), int(month_s), 1)
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Invalid month key {key!r}; expected YYYY-MM.") from exc


def month_info(value: date, config: Config | None = None) -> MonthInfo:
    C = config or cfg
    start = first_of_month(value)
    return MonthInfo(key=month_key(start), label=start.strftime(C.MONTH_LABEL_FORMAT))


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar months."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if not isinstance(self.start, date) or not isinstance(self.end, date):
            raise TypeError("DateRange bounds must be datetime.date instances.")
        object.__setattr__(self, "start", first_of_month(self.start))
        object.__setattr__(self, "end", first_of_month(self.end))
        if self.end < self.start:
            raise ValueError("DateRange end must not be before start.")

    @classmethod
    def months_from(
        cls, start: date, count: int | None = None, config: Config | None = None
    ) -> "DateRange":
        """`count` months starting at `start`; defaults to `HORIZON_MONTHS`."""
        if count is None:
            count = (config or cfg).HORIZON_MONTHS
        if count <= 0:
            raise ValueError("count must be > 0.")
        begin = first_of_month(start)
        return cls(start=begin, end=add_months(begin, count - 1))

    @property
    def month_count(self) -> int:
        return months_between(self.start, self.end) + 1

    def months(self, config: Config | None = None) -> list[MonthInfo]:
        return [month_info(m, config) for m in month_sequence(self.start, self.end)]
