"""
Project service — projects, team membership and per-project workload views.

Transaction policy: functions flush, never commit. Caller (route handler)
is responsible for db.session.commit().

Visibility:
    Admin / Manager    every project
    Employee / Trial   only projects they are assigned to (ProjectUser)
"""
import logging

from sqlalchemy import select

from lencondb.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from lencondb.models import db, iso
from lencondb.models.company import Company
from lencondb.models.construction import Construction
from lencondb.models.document import Document
from lencondb.models.payment import PaymentSchedule
from lencondb.models.project import PROJECT_STATUSES, PROJECT_TYPES, Project, ProjectUser
from lencondb.models.user import ROLE_ADMIN, ROLE_MANAGER, User
from lencondb.models.workload import WorkloadPlan
from lencondb.utils.helpers import parse_date_input, parse_text

logger = logging.getLogger(__name__)

_FULL_VISIBILITY = (ROLE_ADMIN, ROLE_MANAGER)


# ── Lookups & visibility ─────────────────────────────────────────────────


def get_project(project_id: str) -> Project:
    project = db.session.get(Project, project_id)
    if not project:
        raise NotFoundError(resource="Project", resource_id=project_id)
    return project


def is_assigned(project_id: str, user_id: str) -> bool:
    return ProjectUser.query.filter_by(project_id=project_id, user_id=user_id).first() is not None


def ensure_can_view(project: Project, user_id: str, role: str) -> None:
    """Raise PermissionDeniedError when an Employee/Trial user is not on the team."""
    if role in _FULL_VISIBILITY:
        return
    if not is_assigned(project.id, user_id):
        logger.warning("User %s (%s) denied access to project %s", user_id, role, project.id)
        raise PermissionDeniedError("You are not assigned to this project")


def visible_project_ids(user_id: str, role: str):
    """Select of the project ids an Employee/Trial user is assigned to.

    None for roles that see every project; callers skip the filter then.
    """
    if role in _FULL_VISIBILITY:
        return None
    return select(ProjectUser.project_id).where(ProjectUser.user_id == user_id)


def list_projects(user_id: str, role: str, status: str | None = None) -> list[Project]:
    q = Project.query
    if role not in _FULL_VISIBILITY:
        q = q.join(ProjectUser, ProjectUser.project_id == Project.id).filter(
            ProjectUser.user_id == user_id,
        )
    if status:
        q = q.filter(Project.status == status)
    return q.order_by(Project.created_at.desc()).all()


# ── Serialisation ────────────────────────────────────────────────────────


def project_summary(project: Project) -> dict:
    """List-row payload: core fields plus child counts."""
    d = project.to_dict()
    d["construction_count"] = project.constructions.count()
    d["document_count"] = project.documents.count()
    d["user_count"] = project.project_users.count()
    return d


def project_detail(project: Project) -> dict:
    d = project_summary(project)
    d["additional_projects"] = [
        {"id": p.id, "name": p.name, "status": p.status, "contract_date": iso(p.contract_date)}
        for p in project.additional_projects
    ]
    d["constructions"] = [
        {"id": c.id, "name": c.name} for c in project.constructions.order_by(Construction.name)
    ]
    d["documents"] = [doc.to_dict() for doc in project.documents.order_by(Document.uploaded_at)]
    d["payment_schedules"] = [
        p.to_dict() for p in project.payment_schedules.order_by(PaymentSchedule.expected_date)
    ]
    d["user_ids"] = [link.user_id for link in project.project_users]
    d["payment_schedule_count"] = len(d["payment_schedules"])
    return d


# ── Validation ───────────────────────────────────────────────────────────


def _resolve_customer(customer_id: str) -> Company:
    customer = db.session.get(Company, customer_id)
    if not customer:
        raise NotFoundError(resource="Company", resource_id=customer_id)
    if customer.type != "Customer":
        raise ValidationError(
            "customer_id must reference a Customer company",
            details={"customer_id": f"company type is {customer.type}"},
        )
    return customer


def _resolve_manager(manager_id: str) -> User:
    manager = db.session.get(User, manager_id)
    if not manager:
        raise NotFoundError(resource="User", resource_id=manager_id)
    if manager.role not in _FULL_VISIBILITY:
        raise ValidationError(
            "manager_id must reference a Manager or Admin user",
            details={"manager_id": f"user role is {manager.role}"},
        )
    return manager


def _apply_fields(project: Project, data: dict) -> None:
    """Copy validated fields from ``data`` onto ``project``.

    Raises ValueError for malformed dates (blueprint answers 400) and
    ValidationError / NotFoundError for business-rule violations.
    """
    if "name" in data:
        name = parse_text(data["name"], "name")
        if not name:
            raise ValidationError("Project name cannot be empty", details={"name": "required"})
        project.name = name
    for field in ("contract_date", "expiration_date"):
        if field in data:
            value = parse_date_input(data[field], field)
            if value is None:
                raise ValueError(f"{field} is required")
            setattr(project, field, value)
    if "type" in data:
        if data["type"] not in PROJECT_TYPES:
            raise ValidationError(f"Invalid project type: {data['type']}")
        project.type = data["type"]
    if "status" in data:
        if data["status"] not in PROJECT_STATUSES:
            raise ValidationError(f"Invalid project status: {data['status']}")
        project.status = data["status"]
    if "customer_id" in data:
        project.customer_id = _resolve_customer(data["customer_id"]).id
    if "manager_id" in data:
        project.manager_id = _resolve_manager(data["manager_id"]).id
    if "main_project_id" in data:
        main_id = data["main_project_id"] or None
        if main_id is not None:
            if project.id is not None and main_id == project.id:
                raise ValidationError("A project cannot be its own main project")
            get_project(main_id)
        project.main_project_id = main_id

    if (project.contract_date and project.expiration_date
            and project.expiration_date < project.contract_date):
        raise ValidationError(
            "expiration_date cannot be before contract_date",
            details={"expiration_date": "before contract_date"},
        )


# ── CRUD ─────────────────────────────────────────────────────────────────


def create_project(data: dict) -> Project:
    project = Project(type="main", status="Active")
    _apply_fields(project, data)
    db.session.add(project)
    db.session.flush()
    logger.info("Project %s created (customer=%s manager=%s)",
                project.id, project.customer_id, project.manager_id)
    return project


def update_project(project: Project, data: dict) -> Project:
    _apply_fields(project, data)
    db.session.flush()
    return project


def delete_project(project: Project) -> list[str]:
    """Delete a project with all children.

    Returns the stored file names of its documents; the caller removes
    them from disk once the transaction commits.
    """
    stored_files = [doc.path for doc in project.documents]
    db.session.delete(project)
    db.session.flush()
    logger.info("Project %s deleted (%d document file(s))", project.id, len(stored_files))
    return stored_files


# ── Team ─────────────────────────────────────────────────────────────────


def list_team(project: Project) -> list[User]:
    return (
        User.query
        .join(ProjectUser, ProjectUser.user_id == User.id)
        .filter(ProjectUser.project_id == project.id)
        .order_by(User.last_name, User.first_name)
        .all()
    )


def list_available_users(project: Project) -> list[User]:
    team_ids = db.session.query(ProjectUser.user_id).filter(ProjectUser.project_id == project.id)
    return (
        User.query
        .filter(User.id.not_in(team_ids))
        .order_by(User.last_name, User.first_name)
        .all()
    )


def add_user(project: Project, user_id: str) -> tuple[ProjectUser, bool]:
    """Assign a user to the team. Idempotent.

    Returns:
        (link, created) — ``created`` is False when the user was already assigned.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError(resource="User", resource_id=user_id)
    link = ProjectUser.query.filter_by(project_id=project.id, user_id=user_id).first()
    if link:
        return link, False
    link = ProjectUser(project_id=project.id, user_id=user_id)
    db.session.add(link)
    db.session.flush()
    logger.info("User %s added to project %s", user_id, project.id)
    return link, True


def remove_user(project: Project, user_id: str) -> None:
    link = ProjectUser.query.filter_by(project_id=project.id, user_id=user_id).first()
    if not link:
        raise NotFoundError(resource="ProjectUser", resource_id=user_id)
    db.session.delete(link)
    db.session.flush()
    logger.info("User %s removed from project %s", user_id, project.id)


# ── Workload views ───────────────────────────────────────────────────────


def team_workload(project: Project) -> list[dict]:
    """Team members, each with their plans on this project (newest first)."""
    plans_by_user: dict[str, list[dict]] = {}
    for plan in project.workload_plans.order_by(WorkloadPlan.date.desc()):
        plans_by_user.setdefault(plan.user_id, []).append(
            {"id": plan.id, "date": plan.date.isoformat(), "manager_id": plan.manager_id}
        )
    return [
        {
            **user.to_brief(),
            "email": user.email,
            "role": user.role,
            "workload_plans": plans_by_user.get(user.id, []),
        }
        for user in list_team(project)
    ]


def user_workload(project: Project, user_id: str) -> list[WorkloadPlan]:
    if not db.session.get(User, user_id):
        raise NotFoundError(resource="User", resource_id=user_id)
    return (
        project.workload_plans
        .filter(WorkloadPlan.user_id == user_id)
        .order_by(WorkloadPlan.date.desc())
        .all()
    )
