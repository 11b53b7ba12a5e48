"""
Workload plan blueprint.

Endpoints:
    GET    /api/v1/workload-plan?user_id=&project_id=&start_date=&end_date=
    GET    /api/v1/workload-plan/calendar?start_date=&end_date=&user_id=&project_id=
    GET    /api/v1/workload-plan/<id>
    POST   /api/v1/workload-plan            Manager+ (alias: /create) — caller becomes manager
    PATCH  /api/v1/workload-plan/<id>       Manager+ — creator or Admin only
    DELETE /api/v1/workload-plan/<id>       Manager+ — creator or Admin only
"""

from flask import Blueprint, jsonify, request

from lencondb.blueprints import (
    current_role,
    current_user_id,
    json_body,
    query_date,
    register_input_errors,
    require_fields,
)
from lencondb.middleware.role_guards import manager_required
from lencondb.services import workload_plan_service as wps
from lencondb.utils.helpers import db_commit_or_error

workload_plan_bp = register_input_errors(
    Blueprint("workload_plan", __name__, url_prefix="/api/v1/workload-plan")
)


def _filters() -> dict:
    return {
        "user_id": request.args.get("user_id"),
        "project_id": request.args.get("project_id"),
        "start_date": query_date("start_date"),
        "end_date": query_date("end_date"),
    }


@workload_plan_bp.route("", methods=["GET"])
def list_plans():
    return jsonify([p.to_dict() for p in wps.list_plans(**_filters())])


@workload_plan_bp.route("/calendar", methods=["GET"])
def calendar():
    return jsonify(wps.calendar_view(**_filters()))


@workload_plan_bp.route("/<plan_id>", methods=["GET"])
def get_plan(plan_id):
    return jsonify(wps.get_plan(plan_id).to_dict())


@workload_plan_bp.route("", methods=["POST"])
@workload_plan_bp.route("/create", methods=["POST"])
@manager_required
def create_plan():
    data = json_body()
    err = require_fields(data, "user_id", "project_id", "date")
    if err:
        return err
    plan = wps.create_plan(data, manager_id=current_user_id())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(plan.to_dict()), 201


@workload_plan_bp.route("/<plan_id>", methods=["PATCH"])
@manager_required
def update_plan(plan_id):
    plan = wps.get_plan(plan_id)
    wps.update_plan(plan, json_body(), current_user_id(), current_role())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(plan.to_dict())


@workload_plan_bp.route("/<plan_id>", methods=["DELETE"])
@manager_required
def delete_plan(plan_id):
    plan = wps.get_plan(plan_id)
    wps.delete_plan(plan, current_user_id(), current_role())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify({"message": "Workload plan deleted"}), 200
