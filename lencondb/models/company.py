"""Company model — customers and contractors with their bank requisites."""

from lencondb.models import db, iso, new_uuid, utcnow

COMPANY_TYPES = ("Customer", "Contractor")

# Optional text fields accepted on create/update
COMPANY_FIELDS = (
    "address", "phone", "email", "account", "bank", "bik",
    "corr_account", "inn", "kpp", "ogrn", "postal_code",
)


class Company(db.Model):
    __tablename__ = "companies"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name = db.Column(db.String(300), nullable=False)
    type = db.Column(db.String(20), nullable=False, comment="Customer | Contractor")
    address = db.Column(db.String(500), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    email = db.Column(db.String(200), nullable=True)
    account = db.Column(db.String(50), nullable=True, comment="Settlement account")
    bank = db.Column(db.String(300), nullable=True)
    bik = db.Column(db.String(20), nullable=True, comment="Bank identification code")
    corr_account = db.Column(db.String(50), nullable=True)
    inn = db.Column(db.String(20), nullable=True, comment="Taxpayer id")
    kpp = db.Column(db.String(20), nullable=True)
    ogrn = db.Column(db.String(20), nullable=True)
    postal_code = db.Column(db.String(20), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    projects = db.relationship("Project", back_populates="customer", lazy="dynamic")

    def to_dict(self, include_projects: bool = False) -> dict:
        d = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            **{field: getattr(self, field) for field in COMPANY_FIELDS},
            "project_count": self.projects.count(),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if include_projects:
            d["projects"] = [
                {"id": p.id, "name": p.name, "status": p.status}
                for p in self.projects.all()
            ]
        return d

    def __repr__(self) -> str:
        return f"<Company {self.name} ({self.type})>"
