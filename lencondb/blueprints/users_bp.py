"""
Users blueprint — user administration.

Endpoints:
    GET    /api/v1/users                           (Manager+)  newest first
    GET    /api/v1/users/available-employees?date= (Manager+)  unplanned on date
    GET    /api/v1/users/<id>                      (Manager+)
    PATCH  /api/v1/users/<id>                      (Admin)
    DELETE /api/v1/users/<id>                      (Admin)
    POST   /api/v1/users/<id>/invalidate-sessions  (Admin)
"""

import logging
from datetime import date

from flask import Blueprint, jsonify

from lencondb.blueprints import json_body, query_date, register_input_errors
from lencondb.middleware.role_guards import admin_required, manager_required
from lencondb.services import user_service
from lencondb.utils.helpers import db_commit_or_error

logger = logging.getLogger(__name__)

users_bp = register_input_errors(Blueprint("users", __name__, url_prefix="/api/v1/users"))


@users_bp.route("", methods=["GET"])
@manager_required
def list_users():
    return jsonify([u.to_dict() for u in user_service.list_users()])


@users_bp.route("/available-employees", methods=["GET"])
@manager_required
def available_employees():
    """Employees/Managers without a workload plan on ?date= (default today)."""
    on_date = query_date("date") or date.today()
    users = user_service.list_available_employees(on_date)
    return jsonify([u.to_dict() for u in users])


@users_bp.route("/<user_id>", methods=["GET"])
@manager_required
def get_user(user_id):
    return jsonify(user_service.get_user(user_id).to_dict())


@users_bp.route("/<user_id>", methods=["PATCH"])
@admin_required
def update_user(user_id):
    user = user_service.get_user(user_id)
    user_service.update_user(user, json_body())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(user.to_dict())


@users_bp.route("/<user_id>", methods=["DELETE"])
@admin_required
def delete_user(user_id):
    user = user_service.get_user(user_id)
    user_service.delete_user(user)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify({"message": "User deleted"}), 200


@users_bp.route("/<user_id>/invalidate-sessions", methods=["POST"])
@admin_required
def invalidate_sessions(user_id):
    user = user_service.get_user(user_id)
    version = user_service.bump_token_version(user)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify({"message": "Sessions invalidated", "token_version": version})
