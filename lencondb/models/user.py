"""
User model and role constants.

Roles:
    Admin     — full access, user management, deletions
    Manager   — manages projects, plans, documents, payments
    Employee  — submits actual workload, sees assigned projects
    Trial     — read-mostly demo access, sees assigned projects

``token_version`` is embedded in every issued JWT; incrementing it
invalidates all tokens previously issued to the user.
"""

from lencondb.models import db, iso, new_uuid, utcnow

# ── Roles ────────────────────────────────────────────────────────────────────

ROLE_ADMIN = "Admin"
ROLE_MANAGER = "Manager"
ROLE_EMPLOYEE = "Employee"
ROLE_TRIAL = "Trial"

ROLES = (ROLE_ADMIN, ROLE_MANAGER, ROLE_EMPLOYEE, ROLE_TRIAL)

# Roles expected to log working hours (analytics, availability)
WORKFORCE_ROLES = (ROLE_EMPLOYEE, ROLE_MANAGER)


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(200), nullable=False, unique=True)
    phone = db.Column(db.String(50), nullable=False, unique=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(
        db.String(20), nullable=False, default=ROLE_EMPLOYEE,
        comment="Admin | Manager | Employee | Trial",
    )
    telegram_id = db.Column(db.String(100), nullable=True)
    salary = db.Column(db.Numeric(14, 2), nullable=True)
    date_birth = db.Column(db.Date, nullable=True)
    token_version = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    # Relationships (cascade targets — see user_service.delete_user)
    workload_plans = db.relationship(
        "WorkloadPlan", back_populates="user", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
        foreign_keys="WorkloadPlan.user_id",
    )
    workload_actuals = db.relationship(
        "WorkloadActual", back_populates="user", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    project_links = db.relationship(
        "ProjectUser", back_populates="user", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    chat_logs = db.relationship(
        "LenconnectChatLog", back_populates="user", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_brief(self) -> dict:
        """Minimal identity block embedded in other entities' payloads."""
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "telegram_id": self.telegram_id,
            "salary": float(self.salary) if self.salary is not None else None,
            "date_birth": iso(self.date_birth),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
