"""
Module with example code for building demand/capacity forecast matrices.

There are three ways to run the code:

1. Run the code with default options. This will generate
    synthetic client, staff and task records and build a 12 month matrix.
2. Run the code with records defined via code, then filter the matrix
    by preferred staff.
3. Run the code with a record snapshot pre-defined in a JSON file, then
    filter it by skill and month range.

Usage via cli:
    python3 -m src.example --option 1
"""

from __future__ import annotations

import argparse
from datetime import date

from forecast_matrix import (
    ClientRecord,
    Config,
    DateRange,
    FilterConfig,
    ForecastEngine,
    MonthRange,
    PreferredStaffMode,
    PrintObserver,
    StaffCapacityRecord,
    TaskRecord,
)
from forecast_matrix.generate.records import (
    RecordGenConfig,
    create_records,
    record_summary,
    records_from_json,
)
from forecast_matrix.reporting import (
    demand_pivot,
    format_performance,
    format_validation,
    render_text_report,
)

cfg = Config(
    HORIZON_MONTHS=12,
    CACHE_TTL_MS=5 * 60 * 1000,
    FALLBACK_CAPACITY_SKILL="Junior Staff",
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run forecast matrix examples.")
    parser.add_argument(
        "--option",
        type=int,
        default=3,
        choices=(1, 2, 3),
        help="Example scenario to run (default: 3).",
    )
    parser.add_argument(
        "--start",
        type=date.fromisoformat,
        default=date(2025, 1, 1),
        help="First month of the forecast window, YYYY-MM-DD (default: 2025-01-01).",
    )
    return parser.parse_args()


def run_option(option: int, start: date) -> None:
    print(f"Running example code with option {option}")
    engine = ForecastEngine(config=cfg, observer=PrintObserver())
    window = DateRange.months_from(start, config=cfg)

    # Synthetic records from the generator defaults.
    if option == 1:

        records = create_records(RecordGenConfig(n_tasks=80, anchor_year=start.year))
        print(record_summary(records))
        matrix = engine.demand_matrix(
            records.tasks, records.clients, records.staff, window
        )
        render_text_report(matrix, validation=engine.validate(matrix))

    # Records defined via code.
    elif option == 2:

        clients = [ClientRecord(id="c1", legal_name="Acme Ltd")]
        staff = [
            StaffCapacityRecord(
                staff_id="s1",
                assigned_skills=["Senior Staff"],
                weekly_available_hours=30,
                full_name="Sam Lee",
            ),
            StaffCapacityRecord(staff_id="s2", weekly_available_hours=20),
        ]
        tasks = [
            TaskRecord(
                id="t1",
                client_id="c1",
                name="Bookkeeping",
                estimated_hours=5,
                required_skills=["Junior Staff"],
                recurrence_type="Weekly",
            ),
            TaskRecord(
                id="t2",
                client_id="c1",
                name="Management accounts",
                estimated_hours=8,
                required_skills=["Senior Staff"],
                recurrence_type="Monthly",
                preferred_staff_id="s1",
            ),
        ]
        matrix = engine.demand_matrix(tasks, clients, staff, window)
        for mode in PreferredStaffMode:
            selection = ("s1",) if mode is PreferredStaffMode.SPECIFIC else ()
            fc = FilterConfig(
                preferred_staff_filter_mode=mode, selected_preferred_staff=selection
            )
            filtered = engine.filtered_matrix(matrix, fc)
            print(f"\nPreferred staff mode '{mode.value}':")
            print(format_performance(engine.performance_report(matrix, filtered, fc)))

    # Record snapshot from JSON. Typical production use.
    elif option == 3:

        records = records_from_json()
        print(
            format_validation(
                engine.validate_records(records.tasks, records.clients, records.staff)
            )
        )
        matrix = engine.demand_matrix(
            records.tasks, records.clients, records.staff, window
        )
        fc = FilterConfig(
            selected_skills=("Senior Staff", "CPA"),
            month_range=MonthRange(start=0, end=5),
        )
        filtered = engine.filtered_matrix(matrix, fc)
        print(demand_pivot(filtered).round(1).to_string())
        render_text_report(
            filtered,
            validation=engine.validate(filtered),
            performance=engine.performance_report(matrix, filtered, fc),
        )
    else:
        raise SystemExit(f"Unknown option {option}")


def main() -> None:
    args = parse_args()
    run_option(args.option, args.start)


if __name__ == "__main__":
    main()
