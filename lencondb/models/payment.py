"""Payment schedule model — planned and actual project payments."""

from lencondb.models import db, iso, new_uuid, utcnow

PAYMENT_TYPES = ("Advance", "MainPayment", "FinalPayment", "Other")


class PaymentSchedule(db.Model):
    __tablename__ = "payment_schedules"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    type = db.Column(
        db.String(20), nullable=False,
        comment="Advance | MainPayment | FinalPayment | Other",
    )
    name = db.Column(db.String(300), nullable=False)
    amount = db.Column(db.Numeric(16, 2), nullable=False)
    percentage = db.Column(db.Float, nullable=True)
    expected_date = db.Column(db.Date, nullable=False)
    actual_date = db.Column(db.Date, nullable=True)
    is_paid = db.Column(db.Boolean, nullable=False, default=False)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    project = db.relationship("Project", back_populates="payment_schedules")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "type": self.type,
            "name": self.name,
            "amount": float(self.amount) if self.amount is not None else None,
            "percentage": self.percentage,
            "expected_date": iso(self.expected_date),
            "actual_date": iso(self.actual_date),
            "is_paid": bool(self.is_paid),
            "description": self.description,
            "project": self.project.to_brief() if self.project else None,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
