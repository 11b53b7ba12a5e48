"""
Workload plan service — manager-created assignments of a user to a project
on a calendar day.

Rules:
    - a plan can only be created for today or a future date (400)
    - one plan per user per date (409)
    - past plans are frozen: no update, no delete (400)
    - only the creating manager or an Admin may change a plan (403)

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
from lencondb.models import db
from lencondb.models.user import ROLE_ADMIN, User
from lencondb.models.workload import WorkloadPlan
from lencondb.services.project_service import get_project
from lencondb.utils.helpers import parse_date_input

logger = logging.getLogger(__name__)


def _today() -> date:
    return date.today()


def list_plans(
    user_id: str | None = None,
    project_id: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[WorkloadPlan]:
    q = WorkloadPlan.query
    if user_id:
        q = q.filter(WorkloadPlan.user_id == user_id)
    if project_id:
        q = q.filter(WorkloadPlan.project_id == project_id)
    if start_date:
        q = q.filter(WorkloadPlan.date >= start_date)
    if end_date:
        q = q.filter(WorkloadPlan.date <= end_date)
    return q.order_by(WorkloadPlan.date.asc(), WorkloadPlan.created_at.asc()).all()


def calendar_view(**filters) -> dict[str, list[dict]]:
    """Plans grouped by ISO date key, in date order."""
    grouped: dict[str, list[dict]] = {}
    for plan in list_plans(**filters):
        grouped.setdefault(plan.date.isoformat(), []).append(plan.to_dict())
    return grouped


def get_plan(plan_id: str) -> WorkloadPlan:
    plan = db.session.get(WorkloadPlan, plan_id)
    if not plan:
        raise NotFoundError(resource="WorkloadPlan", resource_id=plan_id)
    return plan


def _ensure_not_past(day: date, message: str) -> None:
    if day < _today():
        raise ValidationError(message, details={"date": day.isoformat()}, status=400)


def _ensure_free(user_id: str, day: date, exclude_id: str | None = None) -> None:
    q = WorkloadPlan.query.filter_by(user_id=user_id, date=day)
    if exclude_id:
        q = q.filter(WorkloadPlan.id != exclude_id)
    if q.first():
        raise ConflictError(
            resource="WorkloadPlan",
            message=f"User already has a workload plan on {day.isoformat()}",
        )


def _ensure_can_change(plan: WorkloadPlan, caller_id: str, caller_role: str) -> None:
    if caller_role != ROLE_ADMIN and plan.manager_id != caller_id:
        logger.warning("User %s denied change of plan %s owned by %s",
                       caller_id, plan.id, plan.manager_id)
        raise PermissionDeniedError("Only the manager who created the plan or an Admin can change it")


def create_plan(data: dict, manager_id: str) -> WorkloadPlan:
    day = parse_date_input(data.get("date"))
    if day is None:
        raise ValueError("date is required")
    _ensure_not_past(day, "Cannot create a workload plan for a past date")

    if not db.session.get(User, data["user_id"]):
        raise NotFoundError(resource="User", resource_id=data["user_id"])
    project = get_project(data["project_id"])
    _ensure_free(data["user_id"], day)

    plan = WorkloadPlan(
        user_id=data["user_id"],
        project_id=project.id,
        manager_id=manager_id,
        date=day,
    )
    db.session.add(plan)
    db.session.flush()
    logger.info("Plan %s: user %s on project %s at %s", plan.id, plan.user_id, project.id, day)
    return plan


def update_plan(plan: WorkloadPlan, data: dict, caller_id: str, caller_role: str) -> WorkloadPlan:
    _ensure_not_past(plan.date, "Cannot change a workload plan in the past")
    _ensure_can_change(plan, caller_id, caller_role)

    new_user_id = data.get("user_id") or plan.user_id
    new_day = plan.date
    if data.get("date"):
        new_day = parse_date_input(data["date"])
        _ensure_not_past(new_day, "Cannot move a workload plan to a past date")

    if new_user_id != plan.user_id:
        if not db.session.get(User, new_user_id):
            raise NotFoundError(resource="User", resource_id=new_user_id)
    if new_user_id != plan.user_id or new_day != plan.date:
        _ensure_free(new_user_id, new_day, exclude_id=plan.id)

    if data.get("project_id"):
        plan.project_id = get_project(data["project_id"]).id
    plan.user_id = new_user_id
    plan.date = new_day
    db.session.flush()
    return plan


def delete_plan(plan: WorkloadPlan, caller_id: str, caller_role: str) -> None:
    _ensure_not_past(plan.date, "Cannot delete a workload plan in the past")
    _ensure_can_change(plan, caller_id, caller_role)
    db.session.delete(plan)
    db.session.flush()
    logger.info("Plan %s deleted by %s", plan.id, caller_id)
