"""initial_schema

Users, companies, projects with team membership, constructions, documents,
payment schedules, planned and actual workload, assistant chat logs.

Revision ID: 5e1c0a7d2b41
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "5e1c0a7d2b41"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated=True):
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False))
    return cols


def upgrade():
    bind = op.get_bind()
    existing_tables = set(sa_inspect(bind).get_table_names())

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("first_name", sa.String(length=100), nullable=False),
            sa.Column("last_name", sa.String(length=100), nullable=False),
            sa.Column("email", sa.String(length=200), nullable=False),
            sa.Column("phone", sa.String(length=50), nullable=False),
            sa.Column("password_hash", sa.String(length=256), nullable=False),
            sa.Column("role", sa.String(length=20), nullable=False, server_default="Employee"),
            sa.Column("telegram_id", sa.String(length=100), nullable=True),
            sa.Column("salary", sa.Numeric(14, 2), nullable=True),
            sa.Column("date_birth", sa.Date(), nullable=True),
            sa.Column("token_version", sa.Integer(), nullable=False, server_default="0"),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("email"),
            sa.UniqueConstraint("phone"),
        )

    if "companies" not in existing_tables:
        op.create_table(
            "companies",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=300), nullable=False),
            sa.Column("type", sa.String(length=20), nullable=False),
            sa.Column("address", sa.String(length=500), nullable=True),
            sa.Column("phone", sa.String(length=50), nullable=True),
            sa.Column("email", sa.String(length=200), nullable=True),
            sa.Column("account", sa.String(length=50), nullable=True),
            sa.Column("bank", sa.String(length=300), nullable=True),
            sa.Column("bik", sa.String(length=20), nullable=True),
            sa.Column("corr_account", sa.String(length=50), nullable=True),
            sa.Column("inn", sa.String(length=20), nullable=True),
            sa.Column("kpp", sa.String(length=20), nullable=True),
            sa.Column("ogrn", sa.String(length=20), nullable=True),
            sa.Column("postal_code", sa.String(length=20), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
        )

    if "projects" not in existing_tables:
        op.create_table(
            "projects",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=300), nullable=False),
            sa.Column("contract_date", sa.Date(), nullable=False),
            sa.Column("expiration_date", sa.Date(), nullable=False),
            sa.Column("type", sa.String(length=20), nullable=False, server_default="main"),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="Active"),
            sa.Column("customer_id", sa.String(length=36), nullable=False),
            sa.Column("manager_id", sa.String(length=36), nullable=False),
            sa.Column("main_project_id", sa.String(length=36), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["customer_id"], ["companies.id"], ondelete="RESTRICT"),
            sa.ForeignKeyConstraint(["manager_id"], ["users.id"], ondelete="RESTRICT"),
            sa.ForeignKeyConstraint(["main_project_id"], ["projects.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_projects_customer_id", "projects", ["customer_id"])
        op.create_index("ix_projects_manager_id", "projects", ["manager_id"])

    if "project_users" not in existing_tables:
        op.create_table(
            "project_users",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("project_id", sa.String(length=36), nullable=False),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            *_timestamps(updated=False),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("user_id", "project_id", name="uq_project_users_user_project"),
        )
        op.create_index("ix_project_users_project_id", "project_users", ["project_id"])
        op.create_index("ix_project_users_user_id", "project_users", ["user_id"])

    if "constructions" not in existing_tables:
        op.create_table(
            "constructions",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=300), nullable=False),
            sa.Column("project_id", sa.String(length=36), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_constructions_project_id", "constructions", ["project_id"])

    if "documents" not in existing_tables:
        op.create_table(
            "documents",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("type", sa.String(length=40), nullable=False),
            sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
            sa.Column("path", sa.String(length=255), nullable=False),
            sa.Column("original_name", sa.String(length=255), nullable=False),
            sa.Column("mime_type", sa.String(length=150), nullable=False),
            sa.Column("hash_name", sa.String(length=255), nullable=False),
            sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("uploaded_by_id", sa.String(length=36), nullable=True),
            sa.Column("project_id", sa.String(length=36), nullable=False),
            sa.Column("construction_id", sa.String(length=36), nullable=True),
            sa.ForeignKeyConstraint(["uploaded_by_id"], ["users.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["construction_id"], ["constructions.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_documents_project_id", "documents", ["project_id"])
        op.create_index("ix_documents_construction_id", "documents", ["construction_id"])

    if "payment_schedules" not in existing_tables:
        op.create_table(
            "payment_schedules",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("project_id", sa.String(length=36), nullable=False),
            sa.Column("type", sa.String(length=20), nullable=False),
            sa.Column("name", sa.String(length=300), nullable=False),
            sa.Column("amount", sa.Numeric(16, 2), nullable=False),
            sa.Column("percentage", sa.Float(), nullable=True),
            sa.Column("expected_date", sa.Date(), nullable=False),
            sa.Column("actual_date", sa.Date(), nullable=True),
            sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("description", sa.Text(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_payment_schedules_project_id", "payment_schedules", ["project_id"])

    if "workload_plans" not in existing_tables:
        op.create_table(
            "workload_plans",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("project_id", sa.String(length=36), nullable=False),
            sa.Column("manager_id", sa.String(length=36), nullable=True),
            sa.Column("date", sa.Date(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["manager_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("user_id", "date", name="uq_workload_plans_user_date"),
        )
        op.create_index("ix_workload_plans_user_id", "workload_plans", ["user_id"])
        op.create_index("ix_workload_plans_project_id", "workload_plans", ["project_id"])
        op.create_index("ix_workload_plans_date", "workload_plans", ["date"])

    if "workload_actuals" not in existing_tables:
        op.create_table(
            "workload_actuals",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("date", sa.Date(), nullable=False),
            sa.Column("hours_worked", sa.Float(), nullable=False),
            sa.Column("user_text", sa.Text(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("user_id", "date", name="uq_workload_actuals_user_date"),
        )
        op.create_index("ix_workload_actuals_user_id", "workload_actuals", ["user_id"])
        op.create_index("ix_workload_actuals_date", "workload_actuals", ["date"])

    if "project_workload_distributions" not in existing_tables:
        op.create_table(
            "project_workload_distributions",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("workload_actual_id", sa.String(length=36), nullable=False),
            sa.Column("project_id", sa.String(length=36), nullable=False),
            sa.Column("hours", sa.Float(), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            *_timestamps(updated=False),
            sa.ForeignKeyConstraint(
                ["workload_actual_id"], ["workload_actuals.id"], ondelete="CASCADE",
            ),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            "ix_project_workload_distributions_workload_actual_id",
            "project_workload_distributions", ["workload_actual_id"],
        )
        op.create_index(
            "ix_project_workload_distributions_project_id",
            "project_workload_distributions", ["project_id"],
        )

    if "lenconnect_chat_logs" not in existing_tables:
        op.create_table(
            "lenconnect_chat_logs",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("role", sa.String(length=20), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("request_type", sa.String(length=20), nullable=False),
            *_timestamps(updated=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_lenconnect_chat_logs_user_id", "lenconnect_chat_logs", ["user_id"])


def downgrade():
    for table in (
        "lenconnect_chat_logs",
        "project_workload_distributions",
        "workload_actuals",
        "workload_plans",
        "payment_schedules",
        "documents",
        "constructions",
        "project_users",
        "projects",
        "companies",
        "users",
    ):
        op.drop_table(table)
