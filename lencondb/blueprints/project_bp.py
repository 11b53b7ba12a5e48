"""
Project blueprint — projects, team membership, per-project workload.

Endpoints:
    GET    /api/v1/project?status=                              any role (filtered by assignment)
    GET    /api/v1/project/<id>                                 any role (assigned only for Employee/Trial)
    POST   /api/v1/project                                      Manager+ (alias: /project/create)
    PATCH  /api/v1/project/<id>                                 Manager+
    DELETE /api/v1/project/<id>                                 Admin

    GET    /api/v1/project/<id>/workload/employees              Manager+
    GET    /api/v1/project/<id>/workload/employees/<user_id>    Manager+

    GET    /api/v1/project/<id>/users                           Manager/Admin/Trial
    GET    /api/v1/project/<id>/available-users                 Manager+
    POST   /api/v1/project/<id>/users/<user_id>                 Manager+ (idempotent)
    DELETE /api/v1/project/<id>/users/<user_id>                 Manager+
"""

import logging

from flask import Blueprint, jsonify, request

from lencondb.blueprints import (
    current_role,
    current_user_id,
    json_body,
    register_input_errors,
    require_fields,
)
from lencondb.middleware.role_guards import (
    admin_required,
    manager_or_trial_required,
    manager_required,
)
from lencondb.models.project import PROJECT_STATUSES
from lencondb.services import file_storage, project_service
from lencondb.utils.errors import E, api_error
from lencondb.utils.helpers import db_commit_or_error

logger = logging.getLogger(__name__)

project_bp = register_input_errors(Blueprint("project", __name__, url_prefix="/api/v1/project"))


# ═══════════════════════════════════════════════════════════════════════════
#  PROJECT CRUD
# ═══════════════════════════════════════════════════════════════════════════

@project_bp.route("", methods=["GET"])
def list_projects():
    status = request.args.get("status")
    if status and status not in PROJECT_STATUSES:
        return api_error(E.VALIDATION_INVALID, f"status must be one of {', '.join(PROJECT_STATUSES)}")
    projects = project_service.list_projects(current_user_id(), current_role(), status)
    return jsonify([project_service.project_summary(p) for p in projects])


@project_bp.route("/<project_id>", methods=["GET"])
def get_project(project_id):
    project = project_service.get_project(project_id)
    project_service.ensure_can_view(project, current_user_id(), current_role())
    return jsonify(project_service.project_detail(project))


@project_bp.route("", methods=["POST"])
@project_bp.route("/create", methods=["POST"])
@manager_required
def create_project():
    data = json_body()
    err = require_fields(
        data, "name", "contract_date", "expiration_date", "customer_id", "manager_id",
    )
    if err:
        return err

    project = project_service.create_project(data)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(project_service.project_detail(project)), 201


@project_bp.route("/<project_id>", methods=["PATCH"])
@manager_required
def update_project(project_id):
    project = project_service.get_project(project_id)
    project_service.update_project(project, json_body())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(project_service.project_detail(project))


@project_bp.route("/<project_id>", methods=["DELETE"])
@admin_required
def delete_project(project_id):
    project = project_service.get_project(project_id)
    stored_files = project_service.delete_project(project)
    err = db_commit_or_error()
    if err:
        return err
    file_storage.remove_files(stored_files)
    return jsonify({"message": "Project deleted"}), 200


# ═══════════════════════════════════════════════════════════════════════════
#  WORKLOAD
# ═══════════════════════════════════════════════════════════════════════════

@project_bp.route("/<project_id>/workload/employees", methods=["GET"])
@manager_required
def project_workload(project_id):
    project = project_service.get_project(project_id)
    return jsonify(project_service.team_workload(project))


@project_bp.route("/<project_id>/workload/employees/<user_id>", methods=["GET"])
@manager_required
def project_user_workload(project_id, user_id):
    project = project_service.get_project(project_id)
    plans = project_service.user_workload(project, user_id)
    return jsonify([p.to_dict() for p in plans])


# ═══════════════════════════════════════════════════════════════════════════
#  TEAM
# ═══════════════════════════════════════════════════════════════════════════

@project_bp.route("/<project_id>/users", methods=["GET"])
@manager_or_trial_required
def list_project_users(project_id):
    project = project_service.get_project(project_id)
    project_service.ensure_can_view(project, current_user_id(), current_role())
    return jsonify([u.to_dict() for u in project_service.list_team(project)])


@project_bp.route("/<project_id>/available-users", methods=["GET"])
@manager_required
def list_available_users(project_id):
    project = project_service.get_project(project_id)
    return jsonify([u.to_dict() for u in project_service.list_available_users(project)])


@project_bp.route("/<project_id>/users/<user_id>", methods=["POST"])
@manager_required
def add_project_user(project_id, user_id):
    project = project_service.get_project(project_id)
    link, created = project_service.add_user(project, user_id)
    if created:
        err = db_commit_or_error()
        if err:
            return err
    return jsonify(link.to_dict()), 201 if created else 200


@project_bp.route("/<project_id>/users/<user_id>", methods=["DELETE"])
@manager_required
def remove_project_user(project_id, user_id):
    project = project_service.get_project(project_id)
    project_service.remove_user(project, user_id)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify({"message": "User removed from project"}), 200
