# tests/conftest.py
from __future__ import annotations

import os
import random
from datetime import date
from pathlib import Path

import numpy as np
import pytest

from forecast_matrix.periods import DateRange
from forecast_matrix.records import ClientRecord, StaffCapacityRecord, TaskRecord


# -----------------------------
# Global, deterministic seeding
# -----------------------------
@pytest.fixture(autouse=True, scope="session")
def _seed_everything() -> None:
    """
    Make tests deterministic across runs. If you need a different seed in a test,
    override locally.
    """
    seed = int(os.environ.get("PYTEST_SEED", "1234"))
    os.environ["PYTHONHASHSEED"] = str(seed)
    random.seed(seed)
    np.random.seed(seed)


# -----------------------------
# Path helpers
# -----------------------------
@pytest.fixture(scope="session")
def project_root() -> Path:
    """Repository root (where pyproject.toml lives)."""
    return Path(__file__).resolve().parents[1]


# -----------------------------
# Shared records
# -----------------------------
@pytest.fixture
def year_2025() -> DateRange:
    return DateRange.months_from(date(2025, 1, 1), 12)


@pytest.fixture
def clients() -> list[ClientRecord]:
    return [
        ClientRecord(id="c1", legal_name="Acme Ltd"),
        ClientRecord(id="c2", legal_name="Beta LLC"),
    ]


@pytest.fixture
def staff() -> list[StaffCapacityRecord]:
    return [
        StaffCapacityRecord(
            staff_id="s1",
            assigned_skills=["Junior Staff"],
            weekly_available_hours=40,
            full_name="Alice Smith",
        ),
        StaffCapacityRecord(
            staff_id="s2",
            assigned_skills=["Senior Staff", "CPA"],
            weekly_available_hours=30,
            full_name="Ben Jones",
        ),
    ]


@pytest.fixture
def tasks() -> list[TaskRecord]:
    """
    Per month: Junior 10h (t1), Senior 2 x 4.33h (t2), CPA 4h every other
    month averaged to 2h (t3). t4 is inactive and must never contribute.
    """
    return [
        TaskRecord(
            id="t1",
            client_id="c1",
            name="Bookkeeping",
            estimated_hours=10,
            required_skills=["Junior Staff"],
            recurrence_type="Monthly",
            preferred_staff_id="s1",
        ),
        TaskRecord(
            id="t2",
            client_id="c1",
            name="Payroll",
            estimated_hours=2,
            required_skills=["Senior Staff"],
            recurrence_type="Weekly",
        ),
        TaskRecord(
            id="t3",
            client_id="c2",
            name="Advisory",
            estimated_hours=4,
            required_skills=["CPA"],
            recurrence_type="Monthly",
            recurrence_interval=2,
            preferred_staff_id="S2 ",
        ),
        TaskRecord(
            id="t4",
            client_id="c2",
            name="Retired engagement",
            estimated_hours=5,
            required_skills=["Junior Staff"],
            recurrence_type="Monthly",
            is_active=False,
        ),
    ]
