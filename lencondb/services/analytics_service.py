"""
Analytics service — project workload roll-ups and employee hour balances.

Reports:
    projects_workload      per-project planned days vs. actual hours,
                           optionally as of a date and compared to an earlier one
    employee_work_hours    per-employee hours vs. Mon–Fri × 8 expectation

All rounding is half-up (2.5 → 3, -2.5 → -2) so numbers match what the
web client computes for its own exports.
"""
import calendar
import logging
import math
from datetime import date, timedelta

from sqlalchemy import func

from lencondb.core.exceptions import ValidationError
from lencondb.models import db
from lencondb.models.project import Project, ProjectUser
from lencondb.models.user import WORKFORCE_ROLES, User
from lencondb.models.workload import ProjectWorkloadDistribution, WorkloadActual, WorkloadPlan

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 8
# Deviation (hours) beyond which an employee counts as under/over-working
DEVIATION_THRESHOLD = 8


def round_half_up(value: float, digits: int = 0) -> float | int:
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


# ═══════════════════════════════════════════════════════════════
# Projects workload
# ═══════════════════════════════════════════════════════════════


def _planned_days(as_of: date | None) -> dict[str, int]:
    q = db.session.query(
        WorkloadPlan.project_id, func.count(func.distinct(WorkloadPlan.date)),
    )
    if as_of:
        q = q.filter(WorkloadPlan.date <= as_of)
    return dict(q.group_by(WorkloadPlan.project_id).all())


def _actual_hours(as_of: date | None) -> dict[str, float]:
    q = (
        db.session.query(
            ProjectWorkloadDistribution.project_id, func.sum(ProjectWorkloadDistribution.hours),
        )
        .join(WorkloadActual, WorkloadActual.id == ProjectWorkloadDistribution.workload_actual_id)
    )
    if as_of:
        q = q.filter(WorkloadActual.date <= as_of)
    return {pid: float(total or 0) for pid, total in q.group_by(ProjectWorkloadDistribution.project_id)}


def _team_sizes() -> dict[str, int]:
    rows = (
        db.session.query(ProjectUser.project_id, func.count(ProjectUser.id))
        .group_by(ProjectUser.project_id)
        .all()
    )
    return dict(rows)


def progress_percent(actual_hours: float, planned_days: int) -> int:
    """min(100, round(actual / (planned_days × 8) × 100)); 0 without plans."""
    expected = planned_days * HOURS_PER_DAY
    if expected <= 0:
        return 0
    return min(100, round_half_up(actual_hours / expected * 100))


def _project_rows(projects: list[Project], as_of: date | None) -> list[dict]:
    planned = _planned_days(as_of)
    actual = _actual_hours(as_of)
    teams = _team_sizes()
    rows = []
    for p in projects:
        days = planned.get(p.id, 0)
        hours = actual.get(p.id, 0.0)
        rows.append({
            "project_id": p.id,
            "project_name": p.name,
            "status": p.status,
            "type": p.type,
            "customer_name": p.customer.name if p.customer else None,
            "manager_name": p.manager.full_name if p.manager else None,
            "contract_date": p.contract_date.isoformat(),
            "expiration_date": p.expiration_date.isoformat(),
            "total_planned_days": days,
            "total_actual_hours": round_half_up(hours, 1),
            "employee_count": teams.get(p.id, 0),
            "progress": progress_percent(hours, days),
        })
    return rows


def projects_workload(as_of: date | None = None, compare_date: date | None = None) -> dict:
    """Per-project workload, counted up to ``as_of`` (everything when None).

    With ``compare_date`` the same figures are computed as of that earlier
    day and returned side by side with per-project deltas.
    """
    if compare_date and as_of and compare_date > as_of:
        raise ValidationError(
            "compare_date must not be after date",
            details={"date": as_of.isoformat(), "compare_date": compare_date.isoformat()},
            status=400,
        )

    projects = Project.query.order_by(Project.created_at.desc()).all()
    rows = _project_rows(projects, as_of)
    result = {
        "date": as_of.isoformat() if as_of else None,
        "projects": rows,
        "summary": {
            "total_projects": len(projects),
            "active_projects": sum(1 for p in projects if p.status == "Active"),
            "completed_projects": sum(1 for p in projects if p.status == "Completed"),
            "total_hours_worked": round_half_up(sum(r["total_actual_hours"] for r in rows), 1),
        },
    }

    if compare_date:
        earlier = _project_rows(projects, compare_date)
        by_id = {r["project_id"]: r for r in earlier}
        result["compare_date"] = compare_date.isoformat()
        result["compare_projects"] = earlier
        result["deltas"] = [
            {
                "project_id": r["project_id"],
                "planned_days_delta": r["total_planned_days"] - by_id[r["project_id"]]["total_planned_days"],
                "actual_hours_delta": round_half_up(
                    r["total_actual_hours"] - by_id[r["project_id"]]["total_actual_hours"], 1,
                ),
                "progress_delta": r["progress"] - by_id[r["project_id"]]["progress"],
            }
            for r in rows
        ]
    return result


# ═══════════════════════════════════════════════════════════════
# Employee work hours
# ═══════════════════════════════════════════════════════════════


def current_month(today: date | None = None) -> tuple[date, date]:
    today = today or date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def working_days(start: date, end: date) -> int:
    """Count Monday–Friday days in [start, end]."""
    if end < start:
        return 0
    total = (end - start).days + 1
    full_weeks, remainder = divmod(total, 7)
    days = full_weeks * 5
    for offset in range(remainder):
        if (start + timedelta(days=full_weeks * 7 + offset)).weekday() < 5:
            days += 1
    return days


def employee_work_hours(start: date | None = None, end: date | None = None) -> dict:
    default_start, default_end = current_month()
    start = start or default_start
    end = end or default_end
    if end < start:
        raise ValidationError(
            "end_date must not be before start_date",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
            status=400,
        )

    days = working_days(start, end)
    expected = days * HOURS_PER_DAY

    totals = dict(
        db.session.query(WorkloadActual.user_id, func.sum(WorkloadActual.hours_worked))
        .filter(WorkloadActual.date >= start, WorkloadActual.date <= end)
        .group_by(WorkloadActual.user_id)
        .all()
    )
    employees = User.query.filter(User.role.in_(WORKFORCE_ROLES)).all()

    rows = []
    for user in employees:
        worked = float(totals.get(user.id) or 0)
        deviation = worked - expected
        rows.append({
            "id": user.id,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
            "role": user.role,
            "total_hours_worked": round_half_up(worked, 1),
            "expected_hours": expected,
            "deviation": round_half_up(deviation, 1),
            "deviation_percentage": round_half_up(deviation / expected * 100) if expected > 0 else 0,
        })
    rows.sort(key=lambda r: (r["deviation"], r["last_name"], r["first_name"]))

    return {
        "employees": rows,
        "period": {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "working_days": days,
            "expected_hours_per_employee": expected,
        },
        "summary": {
            "total_employees": len(rows),
            "average_hours_worked": (
                round_half_up(sum(r["total_hours_worked"] for r in rows) / len(rows), 1)
                if rows else 0
            ),
            "employees_underworking": sum(1 for r in rows if r["deviation"] < -DEVIATION_THRESHOLD),
            "employees_overworking": sum(1 for r in rows if r["deviation"] > DEVIATION_THRESHOLD),
        },
    }
