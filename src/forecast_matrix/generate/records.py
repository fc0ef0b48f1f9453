# records.py
from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Tuple

import numpy as np

from forecast_matrix.records import (
    ClientRecord,
    StaffCapacityRecord,
    TaskRecord,
    ingest_clients,
    ingest_staff,
    ingest_tasks,
)

DEFAULT_RECORDS_JSON = Path(__file__).resolve().parents[1] / "data" / "example_records.json"

FIRST_NAMES = (
    "Alice", "Ben", "Chloe", "Dan", "Ella", "Farid", "Grace", "Hugo",
    "Isla", "Jack", "Kira", "Liam", "Maya", "Noah", "Olive", "Priya",
    "Quinn", "Ravi", "Sara", "Theo", "Uma", "Victor", "Wren", "Xander",
    "Yara", "Zane", "Amir", "Bea", "Cole", "Dina", "Eli", "Fern",
)  # fmt: skip

LAST_NAMES = ("Smith", "Jones", "Patel", "Nguyen", "Garcia", "Khan", "Brown", "Wilson")

_CLIENT_WORDS = ("Harbor", "Summit", "Cedar", "Granite", "Maple", "Beacon", "Orchid", "Falcon")
_CLIENT_SUFFIXES = ("LLC", "Inc.", "Partners", "Group", "Holdings")


# ----------------------------
# Configuration container
# ----------------------------
@dataclass(slots=True)
class RecordGenConfig:
    """
    Configuration for generation of synthetic client, staff and task records.
    """

    n_clients: int = 12
    n_staff: int = 8
    n_tasks: int = 60

    skills: Tuple[str, ...] = ("Junior Staff", "Senior Staff", "CPA")
    # Share of tasks whose primary skill is skills[i] (must sum to 1.0)
    skill_probs: Tuple[float, ...] = (0.5, 0.35, 0.15)
    # Chance a task needs a second skill as well
    multi_skill_pct: float = 0.10

    recurrence_types: Tuple[str, ...] = (
        "Weekly",
        "Monthly",
        "Quarterly",
        "Annually",
        "Daily",
    )
    recurrence_probs: Tuple[float, ...] = (0.20, 0.45, 0.20, 0.10, 0.05)
    interval_choices: Tuple[int, ...] = (1, 2)
    interval_weights: Tuple[float, ...] = (0.85, 0.15)

    hours_range: Tuple[float, float] = (0.5, 12.0)

    preferred_staff_pct: float = 0.40
    inactive_pct: float = 0.05

    # Staff weekly availability
    weekly_hours_choices: Tuple[float, ...] = (20.0, 32.0, 37.5, 40.0)
    weekly_hours_weights: Tuple[float, ...] = (0.1, 0.2, 0.3, 0.4)

    # Year used for quarterly due dates
    anchor_year: int = field(default_factory=lambda: date.today().year)

    # RNG seed
    seed: Optional[int] = 7

    def validate(self) -> None:
        if self.n_clients <= 0 or self.n_staff <= 0:
            raise ValueError("n_clients and n_staff must be > 0.")
        if self.n_tasks < 0:
            raise ValueError("n_tasks must be >= 0.")
        if len(self.skills) != len(self.skill_probs):
            raise ValueError("skills and skill_probs must be same length.")
        if not np.isclose(sum(self.skill_probs), 1.0, atol=1e-9):
            raise ValueError("skill_probs must sum to 1.0")
        if len(self.recurrence_types) != len(self.recurrence_probs):
            raise ValueError("recurrence_types and recurrence_probs must be same length.")
        if not np.isclose(sum(self.recurrence_probs), 1.0, atol=1e-9):
            raise ValueError("recurrence_probs must sum to 1.0")
        if len(self.interval_choices) != len(self.interval_weights):
            raise ValueError("interval_choices and interval_weights must be same length.")
        if any(i < 1 for i in self.interval_choices):
            raise ValueError("interval_choices must be integers >= 1.")
        if not np.isclose(sum(self.interval_weights), 1.0, atol=1e-9):
            raise ValueError("interval_weights must sum to 1.0")
        lo, hi = self.hours_range
        if not (0.0 < lo <= hi):
            raise ValueError("hours_range must satisfy 0 < low <= high.")
        for name in ("multi_skill_pct", "preferred_staff_pct", "inactive_pct"):
            if not (0.0 <= getattr(self, name) <= 1.0):
                raise ValueError(f"{name} must be in [0,1].")
        if len(self.weekly_hours_choices) != len(self.weekly_hours_weights):
            raise ValueError(
                "weekly_hours_choices and weekly_hours_weights must be same length."
            )
        if not np.isclose(sum(self.weekly_hours_weights), 1.0, atol=1e-9):
            raise ValueError("weekly_hours_weights must sum to 1.0")
        if self.seed is not None and not isinstance(self.seed, int):
            raise ValueError("seed must be an int or None.")


@dataclass(frozen=True)
class RecordSet:
    tasks: tuple[TaskRecord, ...]
    clients: tuple[ClientRecord, ...]
    staff: tuple[StaffCapacityRecord, ...]


# ----------------------------
# Generation helpers
# ----------------------------
def _rng(seed: Optional[int]) -> np.random.Generator:
    return np.random.default_rng(seed) if seed is not None else np.random.default_rng()


def _deterministic_counts(n: int, probs: np.ndarray) -> np.ndarray:
    """
    Turn probabilities into integer counts that sum to n with minimal rounding error.
    """
    expected = probs * n
    floors = np.floor(expected).astype(int)
    shortfall = n - floors.sum()
    if shortfall > 0:
        remainders = expected - floors
        bump_idx = np.argsort(remainders)[::-1][:shortfall]
        floors[bump_idx] += 1
    return floors


# ----------------------------
# Core API
# ----------------------------
def create_clients(cfg: RecordGenConfig) -> list[ClientRecord]:
    cfg.validate()
    g = _rng(cfg.seed)
    clients: list[ClientRecord] = []
    for i in range(cfg.n_clients):
        word = _CLIENT_WORDS[i % len(_CLIENT_WORDS)]
        suffix = _CLIENT_SUFFIXES[int(g.integers(len(_CLIENT_SUFFIXES)))]
        round_no = i // len(_CLIENT_WORDS)
        name = f"{word} {suffix}" if round_no == 0 else f"{word} {round_no + 1} {suffix}"
        clients.append(ClientRecord(id=f"c{i + 1:03d}", legal_name=name))
    return clients


def create_staff_capacity(cfg: RecordGenConfig) -> list[StaffCapacityRecord]:
    """
    Staff with one primary skill each, distributed close to `skill_probs`
    (every skill gets at least one person when there are enough staff).
    """
    cfg.validate()
    if len(FIRST_NAMES) < cfg.n_staff:
        raise ValueError(f"Not enough FIRST_NAMES ({len(FIRST_NAMES)}) for n={cfg.n_staff}.")
    g = _rng(cfg.seed)

    probs = np.array(cfg.skill_probs, dtype=float)
    counts = _deterministic_counts(cfg.n_staff, probs)
    if cfg.n_staff >= len(cfg.skills):
        for idx in np.where(counts == 0)[0]:
            donor = int(np.argmax(counts))
            counts[donor] -= 1
            counts[idx] += 1
    primary = np.concatenate(
        [np.full(c, i, dtype=int) for i, c in enumerate(counts)]
    )
    g.shuffle(primary)
    weekly = g.choice(
        np.array(cfg.weekly_hours_choices, dtype=float),
        size=cfg.n_staff,
        p=np.array(cfg.weekly_hours_weights, dtype=float),
    )

    staff: list[StaffCapacityRecord] = []
    for i in range(cfg.n_staff):
        skills = [cfg.skills[int(primary[i])]]
        if g.random() < cfg.multi_skill_pct:
            other = int(g.integers(len(cfg.skills)))
            skills.append(cfg.skills[other])
        staff.append(
            StaffCapacityRecord(
                staff_id=f"s{i + 1:03d}",
                assigned_skills=skills,
                weekly_available_hours=float(weekly[i]),
                full_name=f"{FIRST_NAMES[i]} {LAST_NAMES[i % len(LAST_NAMES)]}",
            )
        )
    return staff


def create_tasks(
    cfg: RecordGenConfig,
    clients: Sequence[ClientRecord],
    staff: Sequence[StaffCapacityRecord],
) -> list[TaskRecord]:
    cfg.validate()
    if not clients:
        raise ValueError("create_tasks needs at least one client.")
    g = _rng(None if cfg.seed is None else cfg.seed + 1)

    skill_idx = g.choice(len(cfg.skills), size=cfg.n_tasks, p=np.array(cfg.skill_probs))
    rec_idx = g.choice(
        len(cfg.recurrence_types), size=cfg.n_tasks, p=np.array(cfg.recurrence_probs)
    )
    intervals = g.choice(
        np.array(cfg.interval_choices),
        size=cfg.n_tasks,
        p=np.array(cfg.interval_weights),
    )
    lo, hi = cfg.hours_range
    hours = np.round(g.uniform(lo, hi, size=cfg.n_tasks) * 2) / 2

    tasks: list[TaskRecord] = []
    for i in range(cfg.n_tasks):
        client = clients[int(g.integers(len(clients)))]
        skills = [cfg.skills[int(skill_idx[i])]]
        if g.random() < cfg.multi_skill_pct:
            extra = cfg.skills[int(g.integers(len(cfg.skills)))]
            if extra not in skills:
                skills.append(extra)
        kind = cfg.recurrence_types[int(rec_idx[i])]
        interval = 1 if kind == "Daily" else int(intervals[i])

        preferred: Optional[StaffCapacityRecord] = None
        if staff and g.random() < cfg.preferred_staff_pct:
            fitting = [s for s in staff if skills[0] in s.assigned_skills] or list(staff)
            preferred = fitting[int(g.integers(len(fitting)))]

        month = int(g.integers(1, 13))
        tasks.append(
            TaskRecord(
                id=f"t{i + 1:04d}",
                client_id=client.id,
                name=f"{kind} {skills[0].split()[0].lower()} work for {client.legal_name}",
                estimated_hours=max(float(hours[i]), lo),
                required_skills=skills,
                recurrence_type=kind,
                recurrence_interval=interval,
                preferred_staff_id=preferred.staff_id if preferred else None,
                is_active=bool(g.random() >= cfg.inactive_pct),
                month_of_year=month if kind == "Annually" else None,
                due_date=date(cfg.anchor_year, month, 15) if kind == "Quarterly" else None,
            )
        )
    return tasks


def create_records(cfg: Optional[RecordGenConfig] = None) -> RecordSet:
    cfg = cfg or RecordGenConfig()
    clients = create_clients(cfg)
    staff = create_staff_capacity(cfg)
    tasks = create_tasks(cfg, clients, staff)
    return RecordSet(tasks=tuple(tasks), clients=tuple(clients), staff=tuple(staff))


def record_summary(records: RecordSet) -> dict[str, Any]:
    tasks = records.tasks
    n = len(tasks)
    return {
        "tasks": n,
        "clients": len(records.clients),
        "staff": len(records.staff),
        "recurrence": Counter(t.recurrence_type for t in tasks),
        "active_pct": sum(t.is_active for t in tasks) / n if n else 0.0,
        "preferred_staff_pct": (
            sum(t.preferred_staff_id is not None for t in tasks) / n if n else 0.0
        ),
        "weekly_staff_hours": float(sum(s.weekly_available_hours for s in records.staff)),
    }


def records_from_json(path: str | Path | None = None) -> RecordSet:
    """
    Load a record snapshot from a JSON file on disk.

    If `path` is omitted, the loader reads the snapshot shipped in `forecast_matrix/data/`.
    The file must hold an object with `tasks`, `clients` and `staff` arrays
    (missing arrays are treated as empty).
    """

    file_path = Path(path) if path is not None else DEFAULT_RECORDS_JSON
    file_path = file_path.expanduser()

    if file_path.suffix.lower() != ".json":
        raise ValueError("records_from_json expects a path to a .json file.")
    if not file_path.exists():
        raise FileNotFoundError(f"Records JSON file not found: {file_path}")

    try:
        data = json.loads(file_path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {file_path}") from exc

    if not isinstance(data, Mapping):
        raise TypeError("JSON file must contain an object with tasks/clients/staff.")

    return RecordSet(
        tasks=ingest_tasks(data.get("tasks") or []),
        clients=ingest_clients(data.get("clients") or []),
        staff=ingest_staff(data.get("staff") or []),
    )
