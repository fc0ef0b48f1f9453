from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True, slots=True)
class MonthInfo:
    """A forecast month: `key` is `YYYY-MM` (sorts chronologically), `label` is for display."""

    key: str
    label: str


@dataclass(frozen=True, slots=True)
class RecurrencePattern:
    type: str
    interval: int
    frequency: float  # occurrences per month implied by type + interval


@dataclass(frozen=True, slots=True)
class ClientTaskDemand:
    """One recurring task's contribution to one (skill, month) cell."""

    client_id: str
    client_name: str
    recurring_task_id: str
    task_name: str
    skill_type: str
    estimated_hours: float
    recurrence_pattern: RecurrencePattern
    monthly_hours: float
    preferred_staff_id: Optional[str] = None
    preferred_staff_name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class DemandDataPoint:
    """One matrix cell. Aggregates are always derived from `task_breakdown`."""

    skill_type: str
    month: str
    month_label: str
    demand_hours: float
    task_count: int
    client_count: int
    task_breakdown: tuple[ClientTaskDemand, ...] = ()


@dataclass(frozen=True, slots=True)
class CapacityDataPoint:
    """Available hours for a (skill, month) cell, keyed like DemandDataPoint."""

    skill_type: str
    month: str
    month_label: str
    capacity_hours: float
    staff_count: int = 0


@dataclass(frozen=True, slots=True)
class GapDataPoint:
    skill_type: str
    month: str
    month_label: str
    demand_hours: float
    capacity_hours: float
    gap: float  # capacity - demand; negative = shortage
    utilization_percent: float


@dataclass(frozen=True, slots=True)
class SkillSummary:
    total_hours: float
    task_count: int
    client_count: int


@dataclass(frozen=True, slots=True)
class StaffSummary:
    staff_id: str
    staff_name: str
    total_hours: float
    task_count: int
    client_count: int


@dataclass(frozen=True)
class MatrixData:
    """
    Skill x month demand matrix.

    `horizon` is the month axis the matrix was originally built over; filtered
    matrices keep it so month-range indices always refer to the same months.
    `scope` names whose records the matrix was built from: "all" for the whole
    practice or a client id; filtering keeps it.
    """

    months: tuple[MonthInfo, ...]
    skills: tuple[str, ...]
    data_points: tuple[DemandDataPoint, ...]
    total_demand: float
    total_tasks: int
    total_clients: int
    skill_summary: dict[str, SkillSummary]
    staff_summary: dict[str, StaffSummary] = field(default_factory=dict)
    capacity: tuple[CapacityDataPoint, ...] = ()
    horizon: tuple[MonthInfo, ...] = ()
    scope: str = "all"

    def __post_init__(self) -> None:
        if not self.horizon:
            object.__setattr__(self, "horizon", self.months)

    @property
    def month_keys(self) -> list[str]:
        return [m.key for m in self.months]

    @property
    def total_capacity(self) -> float:
        return float(sum(c.capacity_hours for c in self.capacity))

    def cell(self, skill: str, month: str) -> Optional[DemandDataPoint]:
        return next(
            (p for p in self.data_points if p.skill_type == skill and p.month == month),
            None,
        )

    def capacity_cell(self, skill: str, month: str) -> Optional[CapacityDataPoint]:
        return next(
            (c for c in self.capacity if c.skill_type == skill and c.month == month),
            None,
        )


class PreferredStaffMode(str, Enum):
    ALL = "all"  # no staff-based exclusion
    SPECIFIC = "specific"  # only tasks whose preferred staff is selected
    NONE = "none"  # only tasks without a preferred staff


@dataclass(frozen=True)
class MonthRange:
    """Inclusive, 0-indexed window into a matrix horizon. `end=None` means the last month."""

    start: int = 0
    end: Optional[int] = None

    def window(self, horizon: tuple[MonthInfo, ...]) -> list[MonthInfo]:
        """Slice of `horizon`, indices clamped; an end before the start gives no months."""
        n = len(horizon)
        if n == 0:
            return []
        start = min(max(int(self.start), 0), n - 1)
        end = n - 1 if self.end is None else min(max(int(self.end), 0), n - 1)
        if end < start:
            return []
        return list(horizon[start : end + 1])


@dataclass(frozen=True)
class FilterConfig:
    """
    Filter selection. Empty `selected_skills` / `selected_clients` mean *all*;
    only `PreferredStaffMode.NONE` means "tasks without preferred staff".
    """

    selected_skills: tuple[str, ...] = ()
    selected_clients: tuple[str, ...] = ()
    preferred_staff_filter_mode: PreferredStaffMode = PreferredStaffMode.ALL
    selected_preferred_staff: tuple[str, ...] = ()
    month_range: MonthRange = field(default_factory=MonthRange)

    def __post_init__(self) -> None:
        for attr in ("selected_skills", "selected_clients", "selected_preferred_staff"):
            value = getattr(self, attr)
            if isinstance(value, str):
                raise TypeError(f"{attr} must be a collection of strings, not a string.")
            object.__setattr__(self, attr, tuple(str(v) for v in value))
        object.__setattr__(
            self,
            "preferred_staff_filter_mode",
            PreferredStaffMode(self.preferred_staff_filter_mode),
        )

    def cache_token(self) -> str:
        """Deterministic token for cache keys (selection order does not matter)."""
        end = "last" if self.month_range.end is None else str(self.month_range.end)
        parts = [
            "s=" + ",".join(sorted(self.selected_skills)),
            "c=" + ",".join(sorted(self.selected_clients)),
            "m=" + self.preferred_staff_filter_mode.value,
            "p=" + ",".join(sorted(self.selected_preferred_staff)),
            f"r={self.month_range.start}:{end}",
        ]
        return "|".join(parts)

    def is_noop(self, matrix: MatrixData) -> bool:
        """True when applying this config to `matrix` would keep every cell and task."""
        if self.preferred_staff_filter_mode is not PreferredStaffMode.ALL:
            return False
        if self.selected_skills and not set(matrix.skills) <= set(self.selected_skills):
            return False
        if self.selected_clients:
            clients = {
                e.client_id for p in matrix.data_points for e in p.task_breakdown
            }
            if not clients <= set(self.selected_clients):
                return False
        window = {m.key for m in self.month_range.window(matrix.horizon)}
        return {m.key for m in matrix.months} <= window


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
