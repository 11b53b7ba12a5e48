"""
Lenconnect chat log blueprint — Admin only, append-only.

Endpoints:
    GET  /api/v1/lenconnect-chat-logs                                 all, newest first
    GET  /api/v1/lenconnect-chat-logs/<id>
    GET  /api/v1/lenconnect-chat-logs/user/<user_id>
    GET  /api/v1/lenconnect-chat-logs/user/<user_id>/<request_type>
    POST /api/v1/lenconnect-chat-logs                                 { user_id, role, content, request_type }
"""

from flask import Blueprint, jsonify

from lencondb.blueprints import json_body, register_input_errors, require_fields
from lencondb.middleware.role_guards import admin_required
from lencondb.services import chat_log_service
from lencondb.utils.helpers import db_commit_or_error

chat_log_bp = register_input_errors(
    Blueprint("chat_log", __name__, url_prefix="/api/v1/lenconnect-chat-logs")
)


@chat_log_bp.route("", methods=["GET"])
@admin_required
def list_logs():
    return jsonify([log.to_dict() for log in chat_log_service.list_logs()])


@chat_log_bp.route("/<log_id>", methods=["GET"])
@admin_required
def get_log(log_id):
    return jsonify(chat_log_service.get_log(log_id).to_dict())


@chat_log_bp.route("/user/<user_id>", methods=["GET"])
@admin_required
def user_logs(user_id):
    return jsonify([log.to_dict() for log in chat_log_service.list_logs(user_id=user_id)])


@chat_log_bp.route("/user/<user_id>/<request_type>", methods=["GET"])
@admin_required
def user_logs_by_type(user_id, request_type):
    logs = chat_log_service.list_logs(user_id=user_id, request_type=request_type)
    return jsonify([log.to_dict() for log in logs])


@chat_log_bp.route("", methods=["POST"])
@admin_required
def append_log():
    data = json_body()
    err = require_fields(data, "user_id", "role", "content", "request_type")
    if err:
        return err
    log = chat_log_service.append_log(data)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(log.to_dict()), 201
