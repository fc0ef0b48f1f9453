from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any, Optional, Protocol, TextIO

if TYPE_CHECKING:
    from forecast_matrix.data_models import MatrixData


class MatrixObserver(Protocol):
    """Checkpoints the engine reports to while building matrices."""

    def build_started(self, *, tasks: int, months: int, skills: int) -> None: ...
    def build_finished(self, matrix: MatrixData) -> None: ...
    def warn(self, message: str) -> None: ...


class NullObserver:
    def build_started(self, *, tasks: int, months: int, skills: int) -> None:
        pass

    def build_finished(self, matrix: MatrixData) -> None:
        pass

    def warn(self, message: str) -> None:
        pass


class RecordingObserver:
    """Keeps every checkpoint in memory; handy for diagnostics panels and tests."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.warnings: list[str] = []

    def build_started(self, *, tasks: int, months: int, skills: int) -> None:
        self.events.append(
            ("build_started", {"tasks": tasks, "months": months, "skills": skills})
        )

    def build_finished(self, matrix: MatrixData) -> None:
        self.events.append(
            (
                "build_finished",
                {
                    "data_points": len(matrix.data_points),
                    "total_demand": matrix.total_demand,
                    "total_tasks": matrix.total_tasks,
                },
            )
        )

    def warn(self, message: str) -> None:
        self.warnings.append(message)


class PrintObserver:
    """
    Prints one line per checkpoint.

    Warnings are capped at `max_warnings` lines per build so a badly formed
    snapshot cannot flood the console; the overflow count is printed when the
    build finishes.
    """

    def __init__(self, stream: Optional[TextIO] = None, max_warnings: int = 20):
        self.stream = stream
        self.max_warnings = int(max_warnings)
        self._warned = 0

    def _out(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stdout

    def build_started(self, *, tasks: int, months: int, skills: int) -> None:
        self._warned = 0
        print(
            f"[matrix] build started | tasks={tasks} | months={months} | skills={skills}",
            file=self._out(),
        )

    def build_finished(self, matrix: MatrixData) -> None:
        hidden = self._warned - self.max_warnings
        if hidden > 0:
            print(f"[matrix] … {hidden} more warning(s) suppressed", file=self._out())
        print(
            f"[matrix] build finished | cells={len(matrix.data_points)} | "
            f"demand={matrix.total_demand:,.1f}h | tasks={matrix.total_tasks} | "
            f"clients={matrix.total_clients}",
            file=self._out(),
            flush=True,
        )

    def warn(self, message: str) -> None:
        self._warned += 1
        if self._warned <= self.max_warnings:
            print(f"[matrix] warning: {message}", file=self._out())


def resolve_observer(observer: Optional[MatrixObserver]) -> MatrixObserver:
    return observer if observer is not None else NullObserver()
