"""Construction model — a sub-unit of a project (building, phase, section)."""

from lencondb.models import db, iso, new_uuid, utcnow


class Construction(db.Model):
    __tablename__ = "constructions"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name = db.Column(db.String(300), nullable=False)
    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    project = db.relationship("Project", back_populates="constructions")
    documents = db.relationship("Document", back_populates="construction", lazy="dynamic")

    def to_dict(self, include_documents: bool = False) -> dict:
        d = {
            "id": self.id,
            "name": self.name,
            "project_id": self.project_id,
            "project": self.project.to_brief() if self.project else None,
            "document_count": self.documents.count(),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if include_documents:
            d["documents"] = [doc.to_dict() for doc in self.documents.all()]
        return d
