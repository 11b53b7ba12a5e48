"""Payment schedule service — planned/actual project payments and totals.

Transaction policy: functions flush; the route handler commits.
"""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from lencondb.core.exceptions import NotFoundError, ValidationError
from lencondb.models import db
from lencondb.models.payment import PAYMENT_TYPES, PaymentSchedule
from lencondb.services.project_service import get_project
from lencondb.utils.helpers import parse_bool, parse_date_input, parse_text

logger = logging.getLogger(__name__)


def list_payments(project_id: str | None = None, visible_ids=None) -> list[PaymentSchedule]:
    q = PaymentSchedule.query
    if visible_ids is not None:
        q = q.filter(PaymentSchedule.project_id.in_(visible_ids))
    if project_id:
        q = q.filter_by(project_id=project_id)
    return q.order_by(PaymentSchedule.expected_date.asc()).all()


def get_payment(payment_id: str) -> PaymentSchedule:
    payment = db.session.get(PaymentSchedule, payment_id)
    if not payment:
        raise NotFoundError(resource="PaymentSchedule", resource_id=payment_id)
    return payment


def _amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError) as exc:
        raise ValueError("amount must be a number") from exc
    if not amount.is_finite():
        raise ValueError("amount must be a number")
    if amount < 0:
        raise ValidationError("amount cannot be negative", details={"amount": str(amount)})
    return amount


def _percentage(value) -> float | None:
    if value in (None, ""):
        return None
    try:
        pct = float(value)
    except (ValueError, TypeError) as exc:
        raise ValueError("percentage must be a number") from exc
    if not 0 <= pct <= 100:
        raise ValidationError("percentage must be between 0 and 100", details={"percentage": pct})
    return pct


def _apply_fields(payment: PaymentSchedule, data: dict) -> None:
    if "type" in data:
        if data["type"] not in PAYMENT_TYPES:
            raise ValidationError(
                f"Invalid payment type: {data['type']}",
                details={"type": f"one of {', '.join(PAYMENT_TYPES)}"},
            )
        payment.type = data["type"]
    if "name" in data:
        name = parse_text(data["name"], "name")
        if not name:
            raise ValidationError("Payment name cannot be empty", details={"name": "required"})
        payment.name = name
    if "amount" in data:
        payment.amount = _amount(data["amount"])
    if "percentage" in data:
        payment.percentage = _percentage(data["percentage"])
    if "expected_date" in data:
        expected = parse_date_input(data["expected_date"], "expected_date")
        if expected is None:
            raise ValueError("expected_date is required")
        payment.expected_date = expected
    if "actual_date" in data:
        payment.actual_date = parse_date_input(data["actual_date"], "actual_date")
    if "is_paid" in data:
        payment.is_paid = parse_bool(data["is_paid"], "is_paid")
    if "description" in data:
        payment.description = parse_text(data["description"], "description") or None


def create_payment(data: dict) -> PaymentSchedule:
    project = get_project(data["project_id"])
    payment = PaymentSchedule(project_id=project.id, is_paid=False)
    _apply_fields(payment, data)
    db.session.add(payment)
    db.session.flush()
    logger.info("Payment %s scheduled for project %s", payment.id, project.id)
    return payment


def update_payment(payment: PaymentSchedule, data: dict) -> PaymentSchedule:
    if "project_id" in data:
        payment.project_id = get_project(data["project_id"]).id
    _apply_fields(payment, data)
    db.session.flush()
    return payment


def mark_paid(payment: PaymentSchedule, actual_date: date | None = None) -> PaymentSchedule:
    """Flag a payment as received on ``actual_date`` (today when omitted)."""
    payment.is_paid = True
    payment.actual_date = actual_date or date.today()
    db.session.flush()
    logger.info("Payment %s marked paid on %s", payment.id, payment.actual_date)
    return payment


def delete_payment(payment: PaymentSchedule) -> None:
    db.session.delete(payment)
    db.session.flush()
    logger.info("Payment %s deleted", payment.id)


def payment_summary(
    project_id: str | None = None, today: date | None = None, visible_ids=None,
) -> dict:
    """Totals over the schedule: planned, paid, outstanding and overdue count."""
    today = today or date.today()
    payments = list_payments(project_id, visible_ids)
    planned = sum((p.amount or Decimal("0") for p in payments), Decimal("0"))
    paid = sum((p.amount or Decimal("0") for p in payments if p.is_paid), Decimal("0"))
    overdue = [p for p in payments if not p.is_paid and p.expected_date < today]
    return {
        "project_id": project_id,
        "payment_count": len(payments),
        "total_planned": float(planned),
        "total_paid": float(paid),
        "total_outstanding": float(planned - paid),
        "overdue_count": len(overdue),
        "overdue_amount": float(sum((p.amount for p in overdue), Decimal("0"))),
    }
