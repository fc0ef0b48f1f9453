from dataclasses import dataclass
from typing import Optional


@dataclass
class Config:

    # Forecast window
    HORIZON_MONTHS: int = 12

    ### RECURRENCE ###

    # Occurrences per month implied by the recurrence type
    DAILY_OCCURRENCES_PER_MONTH: float = 30.0
    WEEKLY_OCCURRENCES_PER_MONTH: float = 4.33  # also weeks/month for capacity
    DAYS_PER_MONTH: float = 30.44  # weekday-aware weekly tasks

    # Put Quarterly/Annually hours in their due months when an anchor is known
    ANCHOR_PERIODIC_TASKS: bool = True

    ### CACHE ###

    CACHE_TTL_MS: int = 10 * 60 * 1000
    CACHE_MAX_ENTRIES: Optional[int] = None  # None = unbounded

    ### DIAGNOSTICS ###

    FLOAT_TOLERANCE: float = 1e-6

    ### LABELS ###

    UNKNOWN_CLIENT_NAME: str = "Unknown Client"
    UNASSIGNED_STAFF_LABEL: str = "Unassigned"
    MONTH_LABEL_FORMAT: str = "%b %Y"

    # Skill that absorbs capacity of staff with no assigned skills (None = skip)
    FALLBACK_CAPACITY_SKILL: Optional[str] = None

    def validate(self) -> None:
        """
        Validate the Config object has sensible values before building matrices.
        """
        if self.HORIZON_MONTHS <= 0:
            raise ValueError("HORIZON_MONTHS must be > 0.")
        for attr in (
            "DAILY_OCCURRENCES_PER_MONTH",
            "WEEKLY_OCCURRENCES_PER_MONTH",
            "DAYS_PER_MONTH",
        ):
            if getattr(self, attr) <= 0:
                raise ValueError(f"{attr} must be > 0.")
        if self.CACHE_TTL_MS < 0:
            raise ValueError("CACHE_TTL_MS must be non-negative.")
        if self.CACHE_MAX_ENTRIES is not None and self.CACHE_MAX_ENTRIES <= 0:
            raise ValueError("CACHE_MAX_ENTRIES must be > 0 or None.")
        if not (0.0 < self.FLOAT_TOLERANCE < 1.0):
            raise ValueError("FLOAT_TOLERANCE must be within (0, 1).")
        if (
            self.FALLBACK_CAPACITY_SKILL is not None
            and not self.FALLBACK_CAPACITY_SKILL.strip()
        ):
            raise ValueError("FALLBACK_CAPACITY_SKILL must be a non-empty name or None.")


cfg = Config()
