"""
Document model.

A document row points at one stored file (``path`` = generated file name
inside UPLOAD_FOLDER). Replacing the file keeps the row and bumps
``version``.
"""

from lencondb.models import db, iso, new_uuid, utcnow

DOCUMENT_TYPES = ("tz", "contract", "project_documentation", "working_documentation")


class Document(db.Model):
    __tablename__ = "documents"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    type = db.Column(
        db.String(40), nullable=False,
        comment="tz | contract | project_documentation | working_documentation",
    )
    version = db.Column(db.Integer, nullable=False, default=1)
    path = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255), nullable=False)
    mime_type = db.Column(db.String(150), nullable=False, default="application/octet-stream")
    hash_name = db.Column(db.String(255), nullable=False)
    uploaded_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    uploaded_by_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    construction_id = db.Column(
        db.String(36), db.ForeignKey("constructions.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )

    uploaded_by = db.relationship("User")
    project = db.relationship("Project", back_populates="documents")
    construction = db.relationship("Construction", back_populates="documents")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "version": self.version,
            "path": self.path,
            "original_name": self.original_name,
            "mime_type": self.mime_type,
            "hash_name": self.hash_name,
            "uploaded_at": iso(self.uploaded_at),
            "uploaded_by_id": self.uploaded_by_id,
            "project_id": self.project_id,
            "construction_id": self.construction_id,
            "uploaded_by": self.uploaded_by.to_brief() if self.uploaded_by else None,
            "project": self.project.to_brief() if self.project else None,
            "construction": (
                {"id": self.construction.id, "name": self.construction.name}
                if self.construction else None
            ),
        }

    def __repr__(self) -> str:
        return f"<Document {self.original_name} v{self.version}>"
