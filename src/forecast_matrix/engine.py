from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Optional

from forecast_matrix.cache import ResultCache, cache_key
from forecast_matrix.capacity import gap_analysis
from forecast_matrix.config import Config, cfg
from forecast_matrix.data_models import (
    FilterConfig,
    GapDataPoint,
    MatrixData,
    ValidationResult,
)
from forecast_matrix.filtering import apply_filter
from forecast_matrix.observers import MatrixObserver, resolve_observer
from forecast_matrix.periods import DateRange, month_key
from forecast_matrix.records import ingest_tasks
from forecast_matrix.reporting.data_models import PerformanceReport
from forecast_matrix.reporting.performance import performance_report
from forecast_matrix.transformer import build_matrix
from forecast_matrix.validation import validate, validate_records


class ForecastEngine:
    """
    Builds, filters and validates forecast matrices, caching results in an
    explicitly owned ResultCache.

    Cached matrices are keyed by scope and date range only; call
    `invalidate_client` or `invalidate_all` when the underlying records change.
    Whole-practice results include every client's tasks, so invalidating a
    client also drops the "all" scope.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        cache: Optional[ResultCache] = None,
        observer: Optional[MatrixObserver] = None,
    ) -> None:
        self.config = config or cfg
        self.config.validate()
        self.cache = cache if cache is not None else ResultCache(config=self.config)
        self.observer = resolve_observer(observer)

    def _build(
        self,
        tasks: Iterable[Any],
        clients: Iterable[Any],
        staff: Iterable[Any],
        date_range: DateRange,
    ) -> MatrixData:
        return build_matrix(
            tasks,
            clients,
            staff,
            date_range,
            config=self.config,
            observer=self.observer,
        )

    def demand_matrix(
        self,
        tasks: Iterable[Any],
        clients: Iterable[Any],
        staff: Iterable[Any],
        date_range: DateRange,
    ) -> MatrixData:
        key = cache_key(
            "matrix", "all", month_key(date_range.start), date_range.month_count
        )
        return self.cache.get_or_compute(
            key, lambda: self._build(tasks, clients, staff, date_range)
        )

    def client_matrix(
        self,
        client_id: str,
        tasks: Iterable[Any],
        clients: Iterable[Any],
        staff: Iterable[Any],
        date_range: DateRange,
    ) -> MatrixData:
        """Matrix built from one client's tasks only."""
        client_id = str(client_id)
        own = [t for t in ingest_tasks(tasks) if t.client_id == client_id]
        key = cache_key(
            "matrix", client_id, month_key(date_range.start), date_range.month_count
        )
        return self.cache.get_or_compute(
            key,
            lambda: replace(
                self._build(own, clients, staff, date_range), scope=client_id
            ),
        )

    def filtered_matrix(
        self,
        matrix: MatrixData,
        filter_config: FilterConfig,
        scope_id: Optional[str] = None,
    ) -> MatrixData:
        """Filtered copy of `matrix`, cached under the matrix scope unless `scope_id` is given."""
        if not isinstance(matrix, MatrixData):
            raise TypeError(
                f"filtered_matrix expects MatrixData, got {type(matrix).__name__}."
            )
        window = (
            f"{matrix.months[0].key}:{len(matrix.months)}" if matrix.months else "empty"
        )
        scope = matrix.scope if scope_id is None else str(scope_id)
        key = cache_key("filter", scope, window, filter_config.cache_token())
        return self.cache.get_or_compute(
            key, lambda: apply_filter(matrix, filter_config, config=self.config)
        )

    def validate(self, matrix: Any) -> ValidationResult:
        return validate(matrix, config=self.config)

    def validate_records(
        self, tasks: Iterable[Any], clients: Iterable[Any], staff: Iterable[Any]
    ) -> ValidationResult:
        return validate_records(tasks, clients, staff, config=self.config)

    def gaps(self, matrix: MatrixData) -> tuple[GapDataPoint, ...]:
        return gap_analysis(matrix)

    def performance_report(
        self, original: MatrixData, filtered: MatrixData, filter_config: FilterConfig
    ) -> PerformanceReport:
        return performance_report(original, filtered, filter_config)

    def invalidate_client(self, client_id: str) -> int:
        """Drop the client's entries and every whole-practice entry; returns how many went."""
        removed = self.cache.clear_client(client_id)
        if str(client_id) != "all":
            removed += self.cache.clear_client("all")
        return removed

    def invalidate_all(self) -> None:
        self.cache.clear()
