"""
Company blueprint — customers and contractors.

Endpoints:
    GET    /api/v1/company?type=      any role, ordered by name
    GET    /api/v1/company/<id>       any role, with projects
    POST   /api/v1/company            Admin   (alias: POST /company/create)
    PATCH  /api/v1/company/<id>       Admin
    DELETE /api/v1/company/<id>       Admin   (409 while projects reference it)
"""

import logging

from flask import Blueprint, jsonify, request

from lencondb.blueprints import json_body, register_input_errors, require_fields
from lencondb.middleware.role_guards import admin_required
from lencondb.models.company import COMPANY_TYPES
from lencondb.services import company_service
from lencondb.utils.errors import E, api_error
from lencondb.utils.helpers import db_commit_or_error

logger = logging.getLogger(__name__)

company_bp = register_input_errors(Blueprint("company", __name__, url_prefix="/api/v1/company"))


@company_bp.route("", methods=["GET"])
def list_companies():
    company_type = request.args.get("type")
    if company_type and company_type not in COMPANY_TYPES:
        return api_error(E.VALIDATION_INVALID, f"type must be one of {', '.join(COMPANY_TYPES)}")
    return jsonify([c.to_dict() for c in company_service.list_companies(company_type)])


@company_bp.route("/<company_id>", methods=["GET"])
def get_company(company_id):
    return jsonify(company_service.get_company(company_id).to_dict(include_projects=True))


@company_bp.route("", methods=["POST"])
@company_bp.route("/create", methods=["POST"])
@admin_required
def create_company():
    data = json_body()
    err = require_fields(data, "name", "type")
    if err:
        return err

    company = company_service.create_company(data)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(company.to_dict()), 201


@company_bp.route("/<company_id>", methods=["PATCH"])
@admin_required
def update_company(company_id):
    company = company_service.get_company(company_id)
    company_service.update_company(company, json_body())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(company.to_dict())


@company_bp.route("/<company_id>", methods=["DELETE"])
@admin_required
def delete_company(company_id):
    company = company_service.get_company(company_id)
    company_service.delete_company(company)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify({"message": "Company deleted"}), 200
