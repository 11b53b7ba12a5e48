"""Lenconnect assistant chat log — append-only message history per user."""

from lencondb.models import db, iso, new_uuid, utcnow

CHAT_ROLES = ("User", "Assistant")
CHAT_REQUEST_TYPES = ("Report", "Proposal")


class LenconnectChatLog(db.Model):
    __tablename__ = "lenconnect_chat_logs"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    role = db.Column(db.String(20), nullable=False, comment="User | Assistant")
    content = db.Column(db.Text, nullable=False)
    request_type = db.Column(db.String(20), nullable=False, comment="Report | Proposal")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    user = db.relationship("User", back_populates="chat_logs")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "role": self.role,
            "content": self.content,
            "request_type": self.request_type,
            "created_at": iso(self.created_at),
            "user": (
                {**self.user.to_brief(), "email": self.user.email}
                if self.user else None
            ),
        }
