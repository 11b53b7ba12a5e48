"""
Workload models — planned vs. actual employee time.

Models:
    - WorkloadPlan: manager assigns a user to a project on a date
    - WorkloadActual: hours a user actually worked on a date
    - ProjectWorkloadDistribution: per-project split of a WorkloadActual

Both plan and actual are unique per (user, date).
"""

from lencondb.models import db, iso, new_uuid, utcnow


class WorkloadPlan(db.Model):
    __tablename__ = "workload_plans"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    manager_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    date = db.Column(db.Date, nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    __table_args__ = (
        db.UniqueConstraint("user_id", "date", name="uq_workload_plans_user_date"),
    )

    user = db.relationship("User", foreign_keys=[user_id], back_populates="workload_plans")
    manager = db.relationship("User", foreign_keys=[manager_id])
    project = db.relationship("Project", back_populates="workload_plans")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "project_id": self.project_id,
            "manager_id": self.manager_id,
            "date": iso(self.date),
            "user": self.user.to_brief() if self.user else None,
            "project": self.project.to_brief() if self.project else None,
            "manager": self.manager.to_brief() if self.manager else None,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


class WorkloadActual(db.Model):
    __tablename__ = "workload_actuals"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    date = db.Column(db.Date, nullable=False, index=True)
    hours_worked = db.Column(db.Float, nullable=False)
    user_text = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    __table_args__ = (
        db.UniqueConstraint("user_id", "date", name="uq_workload_actuals_user_date"),
    )

    user = db.relationship("User", back_populates="workload_actuals")
    distributions = db.relationship(
        "ProjectWorkloadDistribution", back_populates="workload_actual",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="ProjectWorkloadDistribution.created_at",
    )

    @property
    def distributed_hours(self) -> float:
        return sum(d.hours for d in self.distributions)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": iso(self.date),
            "hours_worked": self.hours_worked,
            "user_text": self.user_text,
            "user": self.user.to_brief() if self.user else None,
            "distributions": [d.to_dict() for d in self.distributions],
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


class ProjectWorkloadDistribution(db.Model):
    __tablename__ = "project_workload_distributions"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    workload_actual_id = db.Column(
        db.String(36), db.ForeignKey("workload_actuals.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    hours = db.Column(db.Float, nullable=False)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    workload_actual = db.relationship("WorkloadActual", back_populates="distributions")
    project = db.relationship("Project", back_populates="workload_distributions")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "workload_actual_id": self.workload_actual_id,
            "project_id": self.project_id,
            "hours": self.hours,
            "description": self.description,
            "project": self.project.to_brief() if self.project else None,
        }
