from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar

_MISSING_STAFF_TOKENS = {"", "null", "undefined", "none"}


def normalize_staff_id(value: Any) -> Optional[str]:
    """
    Canonical form of a preferred-staff reference for comparisons.

    Returns the lower-cased, stripped id, or None for anything that does not
    name a staff member (None, blanks, and the literal "null"/"undefined").
    """
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in _MISSING_STAFF_TOKENS:
        return None
    return text


def _pick(row: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if name in row and row[name] is not None:
            return row[name]
    return default


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return default
    try:
        f = float(value)
    except (TypeError, ValueError):
        return default
    return int(f) if f.is_integer() else default


def _as_bool(value: Any, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in {"false", "0", "no", "n", "off", ""}
    return bool(value)


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)):
        return [value]
    try:
        return list(value)
    except TypeError:
        return [value]


def _clean_skills(skills: Any) -> list[str]:
    out: list[str] = []
    for s in _as_list(skills):
        if s is None:
            continue
        name = str(s).strip()
        if name and name not in out:
            out.append(name)
    return out


@dataclass(slots=True)
class TaskRecord:
    """A recurring task as delivered by the data-access layer."""

    id: str
    client_id: str
    name: str
    estimated_hours: float
    required_skills: list[str]
    recurrence_type: Optional[str]
    recurrence_interval: int = 1
    preferred_staff_id: Optional[str] = None
    is_active: bool = True
    preferred_staff_name: Optional[str] = None
    # Weekday indices (0 = Monday) for weekly tasks pinned to specific days
    weekdays: Optional[list[int]] = None
    # Anchors for periodic tasks
    month_of_year: Optional[int] = None
    due_date: Optional[date] = None
    # Explicit monthly hours for Custom recurrence
    custom_monthly_hours: Optional[float] = None

    def __post_init__(self) -> None:
        self.id = str(self.id)
        self.client_id = str(self.client_id)
        self.name = str(self.name) if self.name is not None else ""
        self.required_skills = _clean_skills(self.required_skills)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "TaskRecord":
        weekdays = _pick(row, "weekdays")
        return cls(
            id=_pick(row, "id", default=""),
            client_id=_pick(row, "client_id", "clientId", default=""),
            name=_pick(row, "name", "task_name", "taskName", default=""),
            estimated_hours=_as_float(
                _pick(row, "estimated_hours", "estimatedHours")
            ),
            required_skills=_pick(
                row, "required_skills", "requiredSkills", "skills", default=[]
            ),
            recurrence_type=_pick(row, "recurrence_type", "recurrenceType"),
            recurrence_interval=_as_int(
                _pick(row, "recurrence_interval", "recurrenceInterval", "interval"),
                default=1,
            ),
            preferred_staff_id=_pick(row, "preferred_staff_id", "preferredStaffId"),
            is_active=_as_bool(_pick(row, "is_active", "isActive")),
            preferred_staff_name=_pick(
                row, "preferred_staff_name", "preferredStaffName"
            ),
            weekdays=None if weekdays is None else _as_list(weekdays),
            month_of_year=_as_int(_pick(row, "month_of_year", "monthOfYear")),
            due_date=_as_date(_pick(row, "due_date", "dueDate")),
            custom_monthly_hours=(
                None
                if _pick(row, "custom_monthly_hours", "customMonthlyHours") is None
                else _as_float(
                    _pick(row, "custom_monthly_hours", "customMonthlyHours")
                )
            ),
        )


@dataclass(slots=True)
class ClientRecord:
    id: str
    legal_name: str
    status: str = "active"

    def __post_init__(self) -> None:
        self.id = str(self.id)
        self.legal_name = str(self.legal_name).strip() if self.legal_name else ""

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "ClientRecord":
        return cls(
            id=_pick(row, "id", "client_id", "clientId", default=""),
            legal_name=_pick(row, "legal_name", "legalName", "name", default=""),
            status=str(_pick(row, "status", default="active")),
        )


@dataclass(slots=True)
class StaffCapacityRecord:
    """Weekly availability of one staff member."""

    staff_id: str
    assigned_skills: list[str] = field(default_factory=list)
    weekly_available_hours: float = 0.0
    full_name: Optional[str] = None

    def __post_init__(self) -> None:
        self.staff_id = str(self.staff_id)
        self.assigned_skills = _clean_skills(self.assigned_skills)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "StaffCapacityRecord":
        return cls(
            staff_id=_pick(row, "staff_id", "staffId", "id", default=""),
            assigned_skills=_pick(
                row, "assigned_skills", "assignedSkills", "skills", default=[]
            ),
            weekly_available_hours=_as_float(
                _pick(
                    row,
                    "weekly_available_hours",
                    "weeklyAvailableHours",
                    "weekly_hours",
                )
            ),
            full_name=_pick(row, "full_name", "fullName", "name"),
        )


R = TypeVar("R")


def _ingest(
    rows: Iterable[Any], record_type: type[R], parse: Callable[[Mapping[str, Any]], R]
) -> tuple[R, ...]:
    if rows is None or isinstance(rows, (str, bytes, Mapping)):
        raise TypeError(
            f"Expected an iterable of {record_type.__name__} or mappings, "
            f"got {type(rows).__name__}."
        )
    try:
        items = list(rows)
    except TypeError as exc:
        raise TypeError(
            f"Expected an iterable of {record_type.__name__} or mappings, "
            f"got {type(rows).__name__}."
        ) from exc

    out: list[R] = []
    for i, item in enumerate(items):
        if isinstance(item, record_type):
            out.append(item)
        elif isinstance(item, Mapping):
            out.append(parse(item))
        else:
            raise TypeError(
                f"Item {i} is a {type(item).__name__}; expected "
                f"{record_type.__name__} or a mapping."
            )
    return tuple(out)


def ingest_tasks(rows: Iterable[Any]) -> tuple[TaskRecord, ...]:
    return _ingest(rows, TaskRecord, TaskRecord.from_mapping)


def ingest_clients(rows: Iterable[Any]) -> tuple[ClientRecord, ...]:
    return _ingest(rows, ClientRecord, ClientRecord.from_mapping)


def ingest_staff(rows: Iterable[Any]) -> tuple[StaffCapacityRecord, ...]:
    return _ingest(rows, StaffCapacityRecord, StaffCapacityRecord.from_mapping)
