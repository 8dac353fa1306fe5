from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

import pytest
from flask import Flask

from src.attendance_reconciler.attendance_reconciler.employees.model import Employee
from src.attendance_reconciler.attendance_reconciler.reconciliation import service as reconciliation_service
from src.attendance_reconciler.attendance_reconciler.reconciliation.controller import register
from src.attendance_reconciler.attendance_reconciler.reconciliation.service import ReconciliationProcessor
from src.attendance_reconciler.attendance_reconciler.schedules.model import EmployeeSchedule


@dataclass
class StubContainer:
    reconciliation_processor: ReconciliationProcessor


@pytest.fixture
def app(world):
    world.employees.employees.append(Employee(employee_id=1, first_name="Juan", last_name="Dela Cruz"))
    world.schedules.schedules.append(
        EmployeeSchedule(
            schedule_id=1,
            employee_id=1,
            scheduled_time_in=time(8, 0),
            scheduled_time_out=time(17, 0),
            work_days=frozenset({"monday", "tuesday", "wednesday", "thursday", "friday"}),
            effective_date=date(2024, 1, 1),
        )
    )
    world.scans.add("Juan Dela Cruz", datetime(2024, 3, 1, 8, 0))
    world.scans.add("Juan Dela Cruz", datetime(2024, 3, 1, 17, 0))

    flask_app = Flask(__name__)
    flask_app.config["TESTING"] = True
    register(flask_app, StubContainer(reconciliation_processor=world.processor()))
    flask_app.extensions["world"] = world
    return flask_app


def test_endpoint_runs_reprocess(app):
    res = app.test_client().post("/api/attendance/reprocess", json={"from": "2024-03-01", "to": "2024-03-01"})

    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert body["summary"]["created"] == 1
    assert body["summary"]["trigger"] == "manual"
    assert (1, date(2024, 3, 1)) in app.extensions["world"].attendance.rows


def test_endpoint_dry_run_writes_nothing(app):
    res = app.test_client().post(
        "/api/attendance/reprocess",
        json={"from": "2024-03-01", "to": "2024-03-01", "dry_run": True},
    )

    assert res.status_code == 200
    assert res.get_json()["summary"]["dry_run"] is True
    assert app.extensions["world"].attendance.rows == {}


@pytest.mark.parametrize(
    "payload",
    [
        {"from": "01/03/2024", "to": "2024-03-01"},
        {"from": "2024-03-05", "to": "2024-03-01"},
        {"from": "2024-03-01", "to": "2024-03-01", "employee_ids": "1"},
        {"from": "2024-03-01", "to": "2024-03-01", "employee_ids": [0]},
        {"from": "2024-03-01", "to": "2024-03-01", "employee_ids": []},
        {"from": "2024-03-01", "to": "2024-03-01", "force": "false"},
        {"from": "2024-03-01", "to": "2024-03-01", "dry_run": "false"},
    ],
)
def test_endpoint_rejects_bad_input(app, payload):
    res = app.test_client().post("/api/attendance/reprocess", json=payload)

    assert res.status_code == 400
    assert res.get_json()["success"] is False
    assert app.extensions["world"].attendance.rows == {}


def test_cli_dry_run(app):
    result = app.test_cli_runner().invoke(
        args=["reprocess-attendance", "--from", "2024-03-01", "--to", "2024-03-01", "--dry"]
    )

    assert result.exit_code == 0, result.output
    assert "[DRY RUN] 2024-03-01 .. 2024-03-01" in result.output
    assert "created=1" in result.output
    assert app.extensions["world"].attendance.rows == {}


def test_cli_defaults_to_last_seven_days(app, monkeypatch):
    monkeypatch.setattr(reconciliation_service, "now_local", lambda: datetime(2024, 3, 4, 12, 0))

    result = app.test_cli_runner().invoke(args=["reprocess-attendance", "--employee", "1"])

    assert result.exit_code == 0, result.output
    assert "[APPLIED] 2024-02-26 .. 2024-03-04" in result.output
    assert app.extensions["world"].attendance.rows[(1, date(2024, 3, 1))].determination.status.value == "on_time"


def test_cli_rejects_bad_range(app):
    result = app.test_cli_runner().invoke(
        args=["reprocess-attendance", "--from", "2024-03-05", "--to", "2024-03-01"]
    )

    assert result.exit_code == 2
