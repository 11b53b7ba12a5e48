"""Company service — customer/contractor registry.

Transaction policy: functions flush; the route handler commits.
"""
import logging

from lencondb.core.exceptions import ConflictError, NotFoundError, ValidationError
from lencondb.models import db
from lencondb.models.company import COMPANY_FIELDS, COMPANY_TYPES, Company
from lencondb.services.user_service import normalize_email
from lencondb.utils.helpers import parse_text

logger = logging.getLogger(__name__)


def list_companies(company_type: str | None = None) -> list[Company]:
    q = Company.query
    if company_type:
        q = q.filter_by(type=company_type)
    return q.order_by(Company.name).all()


def get_company(company_id: str) -> Company:
    company = db.session.get(Company, company_id)
    if not company:
        raise NotFoundError(resource="Company", resource_id=company_id)
    return company


def _apply_fields(company: Company, data: dict) -> None:
    if "type" in data:
        if data["type"] not in COMPANY_TYPES:
            raise ValidationError(
                f"Invalid company type: {data['type']}",
                details={"type": f"one of {', '.join(COMPANY_TYPES)}"},
            )
        company.type = data["type"]
    if "name" in data:
        company.name = parse_text(data["name"], "name")
    for field in COMPANY_FIELDS:
        if field in data:
            value = parse_text(data[field], field)
            if field == "email" and value:
                value = normalize_email(value)
            setattr(company, field, value or None)


def create_company(data: dict) -> Company:
    company = Company()
    _apply_fields(company, data)
    if not company.name:
        raise ValidationError("Company name cannot be empty", details={"name": "required"})
    db.session.add(company)
    db.session.flush()
    logger.info("Company %s created (%s)", company.id, company.type)
    return company


def update_company(company: Company, data: dict) -> Company:
    _apply_fields(company, data)
    if not company.name:
        raise ValidationError("Company name cannot be empty", details={"name": "required"})
    db.session.flush()
    return company


def delete_company(company: Company) -> None:
    """Delete a company; refused while any project references it."""
    linked = company.projects.count()
    if linked:
        logger.warning("Refused to delete company %s with %d project(s)", company.id, linked)
        raise ConflictError(
            resource="Company",
            message=f"Company has {linked} linked project(s)",
        )
    db.session.delete(company)
    db.session.flush()
    logger.info("Company %s deleted", company.id)
