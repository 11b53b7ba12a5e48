"""Lenconnect chat log service — append-only assistant conversation history."""
import logging

from lencondb.core.exceptions import NotFoundError, ValidationError
from lencondb.models import db
from lencondb.models.chat_log import CHAT_REQUEST_TYPES, CHAT_ROLES, LenconnectChatLog
from lencondb.models.user import User

logger = logging.getLogger(__name__)


def validate_request_type(request_type: str) -> str:
    if request_type not in CHAT_REQUEST_TYPES:
        raise ValidationError(
            f"Invalid request type: {request_type}",
            details={"request_type": f"one of {', '.join(CHAT_REQUEST_TYPES)}"},
            status=400,
        )
    return request_type


def list_logs(user_id: str | None = None, request_type: str | None = None) -> list[LenconnectChatLog]:
    q = LenconnectChatLog.query
    if user_id:
        q = q.filter_by(user_id=user_id)
    if request_type:
        q = q.filter_by(request_type=validate_request_type(request_type))
    return q.order_by(LenconnectChatLog.created_at.desc()).all()


def get_log(log_id: str) -> LenconnectChatLog:
    log = db.session.get(LenconnectChatLog, log_id)
    if not log:
        raise NotFoundError(resource="LenconnectChatLog", resource_id=log_id)
    return log


def append_log(data: dict) -> LenconnectChatLog:
    if not db.session.get(User, data["user_id"]):
        raise NotFoundError(resource="User", resource_id=data["user_id"])
    if data["role"] not in CHAT_ROLES:
        raise ValidationError(
            f"Invalid chat role: {data['role']}",
            details={"role": f"one of {', '.join(CHAT_ROLES)}"},
            status=400,
        )
    log = LenconnectChatLog(
        user_id=data["user_id"],
        role=data["role"],
        content=data["content"],
        request_type=validate_request_type(data["request_type"]),
    )
    db.session.add(log)
    db.session.flush()
    logger.debug("Chat log %s appended for user %s", log.id, log.user_id)
    return log
