from .aggregation import assemble_matrix, fill
from .cache import CacheEntry, ResultCache, cache_key
from .capacity import gap_analysis, skill_gap_summary
from .config import Config, cfg
from .data_models import (
    CapacityDataPoint,
    ClientTaskDemand,
    DemandDataPoint,
    FilterConfig,
    GapDataPoint,
    MatrixData,
    MonthInfo,
    MonthRange,
    PreferredStaffMode,
    ValidationResult,
)
from .engine import ForecastEngine
from .filtering import apply_filter
from .observers import MatrixObserver, NullObserver, PrintObserver, RecordingObserver
from .periods import DateRange
from .records import (
    ClientRecord,
    StaffCapacityRecord,
    TaskRecord,
    normalize_staff_id,
)
from .recurrence import describe_recurrence, monthly_hours
from .transformer import build_matrix
from .validation import validate, validate_records

__all__ = [
    "Config",
    "cfg",
    "DateRange",
    "TaskRecord",
    "ClientRecord",
    "StaffCapacityRecord",
    "normalize_staff_id",
    "MonthInfo",
    "ClientTaskDemand",
    "DemandDataPoint",
    "CapacityDataPoint",
    "GapDataPoint",
    "MatrixData",
    "FilterConfig",
    "MonthRange",
    "PreferredStaffMode",
    "ValidationResult",
    "monthly_hours",
    "describe_recurrence",
    "build_matrix",
    "assemble_matrix",
    "fill",
    "apply_filter",
    "validate",
    "validate_records",
    "ResultCache",
    "CacheEntry",
    "cache_key",
    "gap_analysis",
    "skill_gap_summary",
    "ForecastEngine",
    "MatrixObserver",
    "NullObserver",
    "RecordingObserver",
    "PrintObserver",
]
