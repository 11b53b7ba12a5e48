"""Construction service — sub-units of a project that documents attach to."""
import logging

from lencondb.core.exceptions import NotFoundError, ValidationError
from lencondb.models import db
from lencondb.models.construction import Construction
from lencondb.models.document import Document
from lencondb.services.project_service import get_project
from lencondb.utils.helpers import parse_text

logger = logging.getLogger(__name__)


def list_constructions(project_id: str | None = None, visible_ids=None) -> list[Construction]:
    q = Construction.query
    if visible_ids is not None:
        q = q.filter(Construction.project_id.in_(visible_ids))
    if project_id:
        q = q.filter_by(project_id=project_id)
    return q.order_by(Construction.name).all()


def get_construction(construction_id: str) -> Construction:
    construction = db.session.get(Construction, construction_id)
    if not construction:
        raise NotFoundError(resource="Construction", resource_id=construction_id)
    return construction


def _clean_name(value) -> str:
    name = parse_text(value, "name")
    if not name:
        raise ValidationError("Construction name cannot be empty", details={"name": "required"})
    return name


def create_construction(data: dict) -> Construction:
    project = get_project(data["project_id"])
    construction = Construction(name=_clean_name(data.get("name")), project_id=project.id)
    db.session.add(construction)
    db.session.flush()
    logger.info("Construction %s created in project %s", construction.id, project.id)
    return construction


def update_construction(construction: Construction, data: dict) -> Construction:
    if "name" in data:
        construction.name = _clean_name(data["name"])
    if "project_id" in data and data["project_id"] != construction.project_id:
        project = get_project(data["project_id"])
        # Documents stay with the old project; unlink them from this construction
        Document.query.filter_by(construction_id=construction.id).update(
            {"construction_id": None}, synchronize_session="fetch",
        )
        construction.project_id = project.id
    db.session.flush()
    return construction


def delete_construction(construction: Construction) -> None:
    """Delete a construction; its documents remain on the project, unlinked."""
    detached = Document.query.filter_by(construction_id=construction.id).update(
        {"construction_id": None}, synchronize_session="fetch",
    )
    db.session.delete(construction)
    db.session.flush()
    logger.info("Construction %s deleted (%d document(s) detached)", construction.id, detached)
