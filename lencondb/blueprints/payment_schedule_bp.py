"""
Payment schedule blueprint.

Reads are open to every role; Employee and Trial users only see the
projects they are assigned to.

Endpoints:
    GET    /api/v1/payment-schedule?project_id=           by expected_date
    GET    /api/v1/payment-schedule/summary?project_id=   totals
    GET    /api/v1/payment-schedule/<id>
    POST   /api/v1/payment-schedule                       Manager+ (alias: /create)
    PATCH  /api/v1/payment-schedule/<id>                  Manager+
    PATCH  /api/v1/payment-schedule/<id>/mark-paid        Manager+ body: { actual_date? }
    DELETE /api/v1/payment-schedule/<id>                  Manager+
"""

from flask import Blueprint, jsonify, request

from lencondb.blueprints import (
    ensure_project_visible,
    json_body,
    register_input_errors,
    require_fields,
    visible_project_ids,
)
from lencondb.middleware.role_guards import manager_required
from lencondb.services import payment_schedule_service as pss
from lencondb.utils.helpers import db_commit_or_error, parse_date_input

payment_schedule_bp = register_input_errors(
    Blueprint("payment_schedule", __name__, url_prefix="/api/v1/payment-schedule")
)


@payment_schedule_bp.route("", methods=["GET"])
def list_payments():
    project_id = request.args.get("project_id")
    if project_id:
        ensure_project_visible(project_id)
    payments = pss.list_payments(project_id, visible_project_ids())
    return jsonify([p.to_dict() for p in payments])


@payment_schedule_bp.route("/summary", methods=["GET"])
def payment_summary():
    project_id = request.args.get("project_id")
    if project_id:
        ensure_project_visible(project_id)
    return jsonify(pss.payment_summary(project_id, visible_ids=visible_project_ids()))


@payment_schedule_bp.route("/<payment_id>", methods=["GET"])
def get_payment(payment_id):
    payment = pss.get_payment(payment_id)
    ensure_project_visible(payment.project_id)
    return jsonify(payment.to_dict())


@payment_schedule_bp.route("", methods=["POST"])
@payment_schedule_bp.route("/create", methods=["POST"])
@manager_required
def create_payment():
    data = json_body()
    err = require_fields(data, "project_id", "type", "name", "amount", "expected_date")
    if err:
        return err
    payment = pss.create_payment(data)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(payment.to_dict()), 201


@payment_schedule_bp.route("/<payment_id>", methods=["PATCH"])
@manager_required
def update_payment(payment_id):
    payment = pss.get_payment(payment_id)
    pss.update_payment(payment, json_body())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(payment.to_dict())


@payment_schedule_bp.route("/<payment_id>/mark-paid", methods=["PATCH"])
@manager_required
def mark_paid(payment_id):
    payment = pss.get_payment(payment_id)
    actual_date = parse_date_input(json_body().get("actual_date"), "actual_date")
    pss.mark_paid(payment, actual_date)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(payment.to_dict())


@payment_schedule_bp.route("/<payment_id>", methods=["DELETE"])
@manager_required
def delete_payment(payment_id):
    payment = pss.get_payment(payment_id)
    pss.delete_payment(payment)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify({"message": "Payment schedule deleted"}), 200
