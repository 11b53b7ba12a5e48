"""
Workload actual service — hours users actually worked, optionally split
across projects.

Rules:
    - one entry per user per date (409)
    - 0 < hours_worked <= 24 (422)
    - distributed hours never exceed hours_worked (422)
    - only the owner, a Manager or an Admin may change an entry (403)

Transaction policy: functions flush; the route handler commits.
"""
import logging
from datetime import date

from lencondb.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from lencondb.middleware.role_guards import is_manager_or_admin
from lencondb.models import db
from lencondb.models.workload import ProjectWorkloadDistribution, WorkloadActual
from lencondb.services.project_service import get_project
from lencondb.utils.helpers import parse_date_input, parse_float

logger = logging.getLogger(__name__)

MAX_HOURS_PER_DAY = 24


# ── Queries ──────────────────────────────────────────────────────────────


def _filtered(user_id=None, start_date=None, end_date=None):
    q = WorkloadActual.query
    if user_id:
        q = q.filter(WorkloadActual.user_id == user_id)
    if start_date:
        q = q.filter(WorkloadActual.date >= start_date)
    if end_date:
        q = q.filter(WorkloadActual.date <= end_date)
    return q


def list_actuals(user_id=None, start_date=None, end_date=None) -> list[WorkloadActual]:
    return _filtered(user_id, start_date, end_date).order_by(WorkloadActual.date.desc()).all()


def list_my_actuals(user_id: str, start_date=None, end_date=None) -> list[WorkloadActual]:
    return _filtered(user_id, start_date, end_date).order_by(WorkloadActual.date.asc()).all()


def get_actual_on(user_id: str, day: date) -> WorkloadActual | None:
    return WorkloadActual.query.filter_by(user_id=user_id, date=day).first()


def get_actual(actual_id: str) -> WorkloadActual:
    actual = db.session.get(WorkloadActual, actual_id)
    if not actual:
        raise NotFoundError(resource="WorkloadActual", resource_id=actual_id)
    return actual


def get_distribution(distribution_id: str) -> ProjectWorkloadDistribution:
    dist = db.session.get(ProjectWorkloadDistribution, distribution_id)
    if not dist:
        raise NotFoundError(resource="ProjectWorkloadDistribution", resource_id=distribution_id)
    return dist


# ── Validation ───────────────────────────────────────────────────────────


def ensure_can_modify(actual: WorkloadActual, caller_id: str, caller_role: str) -> None:
    if actual.user_id == caller_id or is_manager_or_admin(caller_role):
        return
    logger.warning("User %s denied change of workload entry %s", caller_id, actual.id)
    raise PermissionDeniedError("You can only change your own workload entries")


def _hours_worked(value) -> float:
    hours = parse_float(value, "hours_worked")
    if not 0 < hours <= MAX_HOURS_PER_DAY:
        raise ValidationError(
            f"hours_worked must be greater than 0 and at most {MAX_HOURS_PER_DAY}",
            details={"hours_worked": hours},
        )
    return hours


def _distribution_hours(value) -> float:
    hours = parse_float(value, "hours")
    if not 0 < hours <= MAX_HOURS_PER_DAY:
        raise ValidationError(
            "Distribution hours must be greater than 0",
            details={"hours": hours},
        )
    return hours


def _ensure_within(total: float, distributed: float) -> None:
    if distributed > total + 1e-9:
        raise ValidationError(
            "Distributed hours exceed hours worked",
            details={"hours_worked": total, "distributed": distributed},
        )


def _build_distribution(item: dict) -> ProjectWorkloadDistribution:
    if not isinstance(item, dict) or not item.get("project_id"):
        raise ValueError("Each distribution needs project_id and hours")
    project = get_project(item["project_id"])
    return ProjectWorkloadDistribution(
        project_id=project.id,
        hours=_distribution_hours(item.get("hours")),
        description=item.get("description") or None,
    )


# ── Mutations ────────────────────────────────────────────────────────────


def create_actual(data: dict, user_id: str) -> WorkloadActual:
    day = parse_date_input(data.get("date"))
    if day is None:
        raise ValueError("date is required")
    hours = _hours_worked(data.get("hours_worked"))

    if get_actual_on(user_id, day):
        raise ConflictError(
            resource="WorkloadActual",
            message=f"Workload for {day.isoformat()} already submitted",
        )

    raw = data.get("distributions") or []
    if not isinstance(raw, list):
        raise ValueError("distributions must be a list")
    distributions = [_build_distribution(item) for item in raw]
    _ensure_within(hours, sum(d.hours for d in distributions))

    actual = WorkloadActual(
        user_id=user_id,
        date=day,
        hours_worked=hours,
        user_text=data.get("user_text") or None,
        distributions=distributions,
    )
    db.session.add(actual)
    db.session.flush()
    logger.info("Workload %s: user %s worked %.1fh on %s (%d split(s))",
                actual.id, user_id, hours, day, len(distributions))
    return actual


def update_actual(actual: WorkloadActual, data: dict) -> WorkloadActual:
    if "hours_worked" in data:
        hours = _hours_worked(data["hours_worked"])
        _ensure_within(hours, actual.distributed_hours)
        actual.hours_worked = hours
    if "user_text" in data:
        actual.user_text = data["user_text"] or None
    db.session.flush()
    return actual


def delete_actual(actual: WorkloadActual) -> None:
    db.session.delete(actual)
    db.session.flush()
    logger.info("Workload %s deleted", actual.id)


def add_distribution(actual: WorkloadActual, data: dict) -> ProjectWorkloadDistribution:
    dist = _build_distribution(data)
    _ensure_within(actual.hours_worked, actual.distributed_hours + dist.hours)
    actual.distributions.append(dist)
    db.session.flush()
    return dist


def remove_distribution(dist: ProjectWorkloadDistribution) -> None:
    db.session.delete(dist)
    db.session.flush()
