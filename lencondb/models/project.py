"""
Project domain models.

Models:
    - Project: a construction contract with a Customer company and a Manager
    - ProjectUser: team membership (user assigned to a project)

A project of type ``additional`` may point at its ``main`` project via
``main_project_id``.
"""

from lencondb.models import db, iso, new_uuid, utcnow

PROJECT_TYPES = ("main", "additional")
PROJECT_STATUSES = ("Active", "Completed")


class Project(db.Model):
    __tablename__ = "projects"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name = db.Column(db.String(300), nullable=False)
    contract_date = db.Column(db.Date, nullable=False)
    expiration_date = db.Column(db.Date, nullable=False)
    type = db.Column(db.String(20), nullable=False, default="main", comment="main | additional")
    status = db.Column(db.String(20), nullable=False, default="Active", comment="Active | Completed")
    customer_id = db.Column(
        db.String(36), db.ForeignKey("companies.id", ondelete="RESTRICT"),
        nullable=False, index=True,
    )
    manager_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False, index=True,
    )
    main_project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    customer = db.relationship("Company", back_populates="projects")
    manager = db.relationship("User", foreign_keys=[manager_id])
    main_project = db.relationship(
        "Project", remote_side=[id], back_populates="additional_projects",
    )
    additional_projects = db.relationship(
        "Project", back_populates="main_project", passive_deletes=True,
    )

    # Children removed together with the project
    constructions = db.relationship(
        "Construction", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    documents = db.relationship(
        "Document", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    payment_schedules = db.relationship(
        "PaymentSchedule", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    project_users = db.relationship(
        "ProjectUser", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    workload_plans = db.relationship(
        "WorkloadPlan", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    workload_distributions = db.relationship(
        "ProjectWorkloadDistribution", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def to_brief(self) -> dict:
        return {"id": self.id, "name": self.name}

    def to_dict(self) -> dict:
        """Serialize core project fields plus customer/manager blocks."""
        return {
            "id": self.id,
            "name": self.name,
            "contract_date": iso(self.contract_date),
            "expiration_date": iso(self.expiration_date),
            "type": self.type,
            "status": self.status,
            "customer_id": self.customer_id,
            "manager_id": self.manager_id,
            "main_project_id": self.main_project_id,
            "customer": (
                {"id": self.customer.id, "name": self.customer.name, "type": self.customer.type}
                if self.customer else None
            ),
            "manager": (
                {**self.manager.to_brief(), "email": self.manager.email}
                if self.manager else None
            ),
            "main_project": self.main_project.to_brief() if self.main_project else None,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Project {self.id}: {self.name}>"


class ProjectUser(db.Model):
    """User assigned to a project team."""

    __tablename__ = "project_users"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint("user_id", "project_id", name="uq_project_users_user_project"),
    )

    project = db.relationship("Project", back_populates="project_users")
    user = db.relationship("User", back_populates="project_links")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "user_id": self.user_id,
            "created_at": iso(self.created_at),
            "user": {
                **self.user.to_brief(),
                "email": self.user.email,
                "phone": self.user.phone,
                "role": self.user.role,
            } if self.user else None,
        }
