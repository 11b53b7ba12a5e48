"""
Construction blueprint.

Endpoints:
    GET    /api/v1/construction?project_id=   Manager/Admin/Trial (Trial: assigned projects)
    GET    /api/v1/construction/<id>          Manager/Admin/Trial (Trial: assigned projects)
    POST   /api/v1/construction               Manager+ (alias: /construction/create)
    PATCH  /api/v1/construction/<id>          Manager+
    DELETE /api/v1/construction/<id>          Manager+ (documents stay, unlinked)
"""

from flask import Blueprint, jsonify, request

from lencondb.blueprints import (
    ensure_project_visible,
    json_body,
    register_input_errors,
    require_fields,
    visible_project_ids,
)
from lencondb.middleware.role_guards import manager_or_trial_required, manager_required
from lencondb.services import construction_service
from lencondb.utils.helpers import db_commit_or_error

construction_bp = register_input_errors(
    Blueprint("construction", __name__, url_prefix="/api/v1/construction")
)


@construction_bp.route("", methods=["GET"])
@manager_or_trial_required
def list_constructions():
    project_id = request.args.get("project_id")
    if project_id:
        ensure_project_visible(project_id)
    items = construction_service.list_constructions(project_id, visible_project_ids())
    return jsonify([c.to_dict() for c in items])


@construction_bp.route("/<construction_id>", methods=["GET"])
@manager_or_trial_required
def get_construction(construction_id):
    construction = construction_service.get_construction(construction_id)
    ensure_project_visible(construction.project_id)
    return jsonify(construction.to_dict(include_documents=True))


@construction_bp.route("", methods=["POST"])
@construction_bp.route("/create", methods=["POST"])
@manager_required
def create_construction():
    data = json_body()
    err = require_fields(data, "name", "project_id")
    if err:
        return err
    construction = construction_service.create_construction(data)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(construction.to_dict()), 201


@construction_bp.route("/<construction_id>", methods=["PATCH"])
@manager_required
def update_construction(construction_id):
    construction = construction_service.get_construction(construction_id)
    construction_service.update_construction(construction, json_body())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(construction.to_dict())


@construction_bp.route("/<construction_id>", methods=["DELETE"])
@manager_required
def delete_construction(construction_id):
    construction = construction_service.get_construction(construction_id)
    construction_service.delete_construction(construction)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify({"message": "Construction deleted"}), 200
