from datetime import date

import pytest

from core.models import HealthStatus, ProjectSnapshot, Resource, ResourceAssignment, ResourceKind, Task
from core.services.reporting import EarnedValueCalculator
from core.services.reporting.evm import health_status, resolve_task_budget

START = date(2024, 1, 1)


def _evm(engine, tasks, report_date, resources=()):
    snapshot = ProjectSnapshot(project_start=START, tasks=tasks, resources=resources)
    schedule = engine.compute(snapshot)
    return EarnedValueCalculator(engine.config).calculate(snapshot, schedule, report_date=report_date)


def test_evm_core_formulas(engine):
    task = Task(
        id="A",
        name="Build",
        duration_days=2,
        calculated_cost=10_000,
        percent_complete=0.4,
        actual_cost=5_000,
    )

    evm = _evm(engine, [task], date(2024, 1, 1))

    assert evm.as_of == date(2024, 1, 1)
    assert evm.BAC == 10_000
    # one of the two calendar days has elapsed by the end of Monday
    assert evm.PV == pytest.approx(5_000)
    assert evm.EV == pytest.approx(4_000)
    assert evm.AC == 5_000
    assert evm.CV == pytest.approx(-1_000)
    assert evm.SV == pytest.approx(-1_000)
    assert evm.CPI == pytest.approx(0.8)
    assert evm.SPI == pytest.approx(0.8)
    assert evm.EAC == pytest.approx(12_500)
    assert evm.ETC == pytest.approx(7_500)
    assert evm.VAC == pytest.approx(-2_500)
    assert evm.TCPI_to_BAC == pytest.approx(1.2)
    assert evm.percent_complete == pytest.approx(0.4)
    assert evm.percent_spent == pytest.approx(0.5)
    assert evm.schedule_health == HealthStatus.RED
    assert evm.cost_health == HealthStatus.RED
    assert evm.notes == ()
    assert evm.tasks[0].planned_fraction == pytest.approx(0.5)


def test_no_actual_cost_leaves_cpi_undefined(engine):
    task = Task(id="A", name="Build", duration_days=2, calculated_cost=1_000, percent_complete=0.5)

    evm = _evm(engine, [task], date(2024, 1, 2))

    assert evm.CPI is None
    assert evm.cost_health is None
    assert evm.EAC == pytest.approx(500)
    assert any("CPI is undefined" in note for note in evm.notes)
    assert evm.SPI == pytest.approx(0.5)


def test_report_before_start_leaves_spi_undefined(engine):
    task = Task(id="A", name="Build", duration_days=2, calculated_cost=1_000, scheduled_start=date(2024, 2, 1))

    evm = _evm(engine, [task], date(2024, 1, 15))

    assert evm.PV == 0
    assert evm.SPI is None
    assert evm.schedule_health is None
    assert any("SPI is undefined" in note for note in evm.notes)


def test_report_after_finish_plans_everything(engine):
    task = Task(id="A", name="Build", duration_days=2, calculated_cost=1_000, percent_complete=1.0, actual_cost=950)

    evm = _evm(engine, [task], date(2024, 3, 1))

    assert evm.PV == pytest.approx(1_000)
    assert evm.SPI == pytest.approx(1.0)
    assert evm.schedule_health == HealthStatus.GREEN
    assert evm.cost_health == HealthStatus.GREEN


def test_zero_earned_value_with_costs(engine):
    task = Task(id="A", name="Build", duration_days=2, calculated_cost=1_000, actual_cost=200)

    evm = _evm(engine, [task], date(2024, 1, 1))

    assert evm.CPI == 0
    assert evm.EAC == pytest.approx(1_200)
    assert any("CPI is 0" in note for note in evm.notes)


def test_empty_project_never_divides_by_zero(engine):
    evm = _evm(engine, [], date(2024, 1, 1))

    assert evm.BAC == 0
    assert evm.CPI is None and evm.SPI is None
    assert evm.percent_complete is None
    assert evm.TCPI_to_BAC is None
    assert evm.notes


def test_budget_from_labor_and_flat_costs():
    dev = Resource(id="dev", name="Dev", bill_rate=100.0)
    licence = Resource(id="lic", name="Licence", kind=ResourceKind.FLAT_COST, flat_cost=250.0)
    task = Task(
        id="A",
        name="Build",
        assignments=(
            ResourceAssignment("dev", allocation_percent=50.0),
            ResourceAssignment("lic"),
            ResourceAssignment("ghost"),
        ),
    )

    budget = resolve_task_budget(task, {"dev": dev, "lic": licence}, duration_hours=16)

    assert budget == pytest.approx(8 * 100 + 250)


def test_stated_cost_wins_over_resources():
    dev = Resource(id="dev", name="Dev", bill_rate=100.0)
    task = Task(id="A", name="Build", calculated_cost=42.0, assignments=(ResourceAssignment("dev", allocated_hours=10),))
    assert resolve_task_budget(task, {"dev": dev}) == 42.0


@pytest.mark.parametrize(
    "index, expected",
    [
        (None, None),
        (1.2, HealthStatus.GREEN),
        (0.95, HealthStatus.GREEN),
        (0.9, HealthStatus.YELLOW),
        (0.85, HealthStatus.YELLOW),
        (0.84, HealthStatus.RED),
    ],
)
def test_health_thresholds(index, expected):
    assert health_status(index) == expected


def test_monthly_series(engine):
    tasks = [
        Task(id="A", name="Jan work", duration_days=5, calculated_cost=1_000),
        Task(id="B", name="Mar work", duration_days=5, calculated_cost=500, scheduled_start=date(2024, 3, 4)),
    ]
    snapshot = ProjectSnapshot(project_start=START, tasks=tasks)
    schedule = engine.compute(snapshot)

    points = EarnedValueCalculator().series(snapshot, schedule, as_of=date(2024, 3, 15))

    assert [p.period_end for p in points] == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]
    assert [p.PV for p in points] == pytest.approx([1_000, 1_000, 1_500])
    assert all(p.BAC == 1_500 for p in points)


def test_midpoint_report_of_half_done_task(engine):
    task = Task(
        id="A",
        name="Build",
        duration_days=2,
        calculated_cost=10_000,
        percent_complete=0.5,
        actual_cost=6_000,
    )

    evm = _evm(engine, [task], date(2024, 1, 1))

    assert evm.BAC == 10_000
    assert evm.PV == pytest.approx(5_000)
    assert evm.EV == pytest.approx(5_000)
    assert evm.CV == pytest.approx(-1_000)
    assert evm.SV == pytest.approx(0)
    assert evm.CPI == pytest.approx(0.8333, abs=1e-4)
    assert evm.SPI == pytest.approx(1.0)
    assert evm.schedule_health == HealthStatus.GREEN
    assert evm.cost_health == HealthStatus.RED


def test_planned_value_counts_calendar_days_inclusively(engine):
    # six working days: Mon 2024-01-01 through Mon 2024-01-08
    task = Task(id="A", name="Build", duration_days=6, calculated_cost=8_000)

    evm = _evm(engine, [task], date(2024, 1, 6))  # Saturday

    assert evm.tasks[0].planned_fraction == pytest.approx(6 / 8)
    assert evm.PV == pytest.approx(6_000)


def test_planned_value_on_first_and_last_day(engine):
    task = Task(id="A", name="Build", duration_days=6, calculated_cost=8_000)

    assert _evm(engine, [task], date(2024, 1, 1)).PV == pytest.approx(1_000)
    assert _evm(engine, [task], date(2024, 1, 8)).PV == pytest.approx(8_000)
    assert _evm(engine, [task], date(2023, 12, 31)).PV == 0
