"""
Workload actual blueprint — hours worked, split by project.

Endpoints:
    GET    /api/v1/workload-actual?user_id=&start_date=&end_date=   newest first
    GET    /api/v1/workload-actual/my?start_date=&end_date=         caller's, oldest first
    GET    /api/v1/workload-actual/date/<date>                      caller's entry or null
    GET    /api/v1/workload-actual/<id>
    POST   /api/v1/workload-actual                                  not Trial (alias: /create)
    PATCH  /api/v1/workload-actual/<id>                             owner or Manager+
    DELETE /api/v1/workload-actual/<id>                             owner or Manager+
    POST   /api/v1/workload-actual/<id>/distribution                owner or Manager+
    DELETE /api/v1/workload-actual/distribution/<distribution_id>   owner or Manager+
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
from lencondb.middleware.role_guards import not_trial_required
from lencondb.services import workload_actual_service as was
from lencondb.utils.helpers import db_commit_or_error, parse_date_input

workload_actual_bp = register_input_errors(
    Blueprint("workload_actual", __name__, url_prefix="/api/v1/workload-actual")
)


@workload_actual_bp.route("", methods=["GET"])
def list_actuals():
    actuals = was.list_actuals(
        user_id=request.args.get("user_id"),
        start_date=query_date("start_date"),
        end_date=query_date("end_date"),
    )
    return jsonify([a.to_dict() for a in actuals])


@workload_actual_bp.route("/my", methods=["GET"])
def my_actuals():
    actuals = was.list_my_actuals(
        current_user_id(),
        start_date=query_date("start_date"),
        end_date=query_date("end_date"),
    )
    return jsonify([a.to_dict() for a in actuals])


@workload_actual_bp.route("/date/<day>", methods=["GET"])
def actual_on_date(day):
    actual = was.get_actual_on(current_user_id(), parse_date_input(day))
    return jsonify(actual.to_dict() if actual else None)


@workload_actual_bp.route("/<actual_id>", methods=["GET"])
def get_actual(actual_id):
    return jsonify(was.get_actual(actual_id).to_dict())


@workload_actual_bp.route("", methods=["POST"])
@workload_actual_bp.route("/create", methods=["POST"])
@not_trial_required
def create_actual():
    data = json_body()
    err = require_fields(data, "date", "hours_worked")
    if err:
        return err
    actual = was.create_actual(data, user_id=current_user_id())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(actual.to_dict()), 201


@workload_actual_bp.route("/<actual_id>", methods=["PATCH"])
@not_trial_required
def update_actual(actual_id):
    actual = was.get_actual(actual_id)
    was.ensure_can_modify(actual, current_user_id(), current_role())
    was.update_actual(actual, json_body())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(actual.to_dict())


@workload_actual_bp.route("/<actual_id>", methods=["DELETE"])
@not_trial_required
def delete_actual(actual_id):
    actual = was.get_actual(actual_id)
    was.ensure_can_modify(actual, current_user_id(), current_role())
    was.delete_actual(actual)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify({"message": "Workload entry deleted"}), 200


@workload_actual_bp.route("/<actual_id>/distribution", methods=["POST"])
@not_trial_required
def add_distribution(actual_id):
    actual = was.get_actual(actual_id)
    was.ensure_can_modify(actual, current_user_id(), current_role())
    data = json_body()
    err = require_fields(data, "project_id", "hours")
    if err:
        return err
    dist = was.add_distribution(actual, data)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(dist.to_dict()), 201


@workload_actual_bp.route("/distribution/<distribution_id>", methods=["DELETE"])
@not_trial_required
def remove_distribution(distribution_id):
    dist = was.get_distribution(distribution_id)
    was.ensure_can_modify(dist.workload_actual, current_user_id(), current_role())
    was.remove_distribution(dist)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify({"message": "Distribution removed"}), 200
