"""
Document blueprint — upload, versioned replace, download.

Endpoints:
    GET    /api/v1/document?project_id=&construction_id=&type=   any role, team members only for Employee/Trial
    GET    /api/v1/document/<id>                                same
    GET    /api/v1/document/<id>/download                       same
    POST   /api/v1/document/upload                              Manager+  multipart: file, project_id, type, construction_id?
    PATCH  /api/v1/document/<id>/replace                        Manager+  multipart: file
    DELETE /api/v1/document/<id>                                Manager+

Stored files are removed only after the database change commits.
"""

import logging
import os

from flask import Blueprint, jsonify, request, send_file

from lencondb.blueprints import (
    current_user_id,
    ensure_project_visible,
    register_input_errors,
    visible_project_ids,
)
from lencondb.middleware.role_guards import manager_required
from lencondb.services import document_service, file_storage
from lencondb.utils.errors import E, api_error
from lencondb.utils.helpers import db_commit_or_error

logger = logging.getLogger(__name__)

document_bp = register_input_errors(Blueprint("document", __name__, url_prefix="/api/v1/document"))


def _uploaded_file():
    file = request.files.get("file")
    if file is None or not file.filename:
        return None, api_error(E.VALIDATION_REQUIRED, "file is required")
    return file, None


@document_bp.route("", methods=["GET"])
def list_documents():
    project_id = request.args.get("project_id")
    if project_id:
        ensure_project_visible(project_id)
    docs = document_service.list_documents(
        project_id=project_id,
        construction_id=request.args.get("construction_id"),
        doc_type=request.args.get("type"),
        visible_ids=visible_project_ids(),
    )
    return jsonify([d.to_dict() for d in docs])


@document_bp.route("/<document_id>", methods=["GET"])
def get_document(document_id):
    document = document_service.get_document(document_id)
    ensure_project_visible(document.project_id)
    return jsonify(document.to_dict())


@document_bp.route("/<document_id>/download", methods=["GET"])
def download_document(document_id):
    document = document_service.get_document(document_id)
    ensure_project_visible(document.project_id)
    path = file_storage.stored_path(document.path)
    if not os.path.isfile(path):
        logger.error("Document %s points at missing file %s", document.id, document.path)
        return api_error(E.NOT_FOUND, "File not found in storage")
    return send_file(
        path,
        mimetype=document.mime_type,
        as_attachment=True,
        download_name=document.original_name,
    )


@document_bp.route("/upload", methods=["POST"])
@manager_required
def upload_document():
    file, err = _uploaded_file()
    if err:
        return err
    project_id = request.form.get("project_id")
    doc_type = request.form.get("type")
    if not project_id or not doc_type:
        missing = [n for n, v in (("project_id", project_id), ("type", doc_type)) if not v]
        return api_error(E.VALIDATION_REQUIRED, f"{', '.join(missing)} required",
                         details={"missing": missing})

    document = document_service.upload_document(
        file,
        project_id=project_id,
        doc_type=doc_type,
        uploaded_by_id=current_user_id(),
        construction_id=request.form.get("construction_id") or None,
    )
    stored_name = document.path
    err = db_commit_or_error()
    if err:
        file_storage.remove_file(stored_name)
        return err
    return jsonify(document.to_dict()), 201


@document_bp.route("/<document_id>/replace", methods=["PATCH", "PUT"])
@manager_required
def replace_document(document_id):
    document = document_service.get_document(document_id)
    file, err = _uploaded_file()
    if err:
        return err

    previous = document_service.replace_document(document, file, current_user_id())
    new_file = document.path
    err = db_commit_or_error()
    if err:
        file_storage.remove_file(new_file)
        return err
    file_storage.remove_file(previous)
    return jsonify(document.to_dict())


@document_bp.route("/<document_id>", methods=["DELETE"])
@manager_required
def delete_document(document_id):
    document = document_service.get_document(document_id)
    stored_name = document_service.delete_document(document)
    err = db_commit_or_error()
    if err:
        return err
    file_storage.remove_file(stored_name)
    return jsonify({"message": "Document deleted"}), 200
