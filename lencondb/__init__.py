"""
LenconDB — construction project and workforce tracking API.
Flask Application Factory.

Usage:
    from lencondb import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

import click
from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy import engine as _sa_engine
from sqlalchemy import event as _sa_event

from lencondb.config import config
from lencondb.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from lencondb.middleware.jwt_auth import init_jwt_middleware
from lencondb.middleware.logging_config import configure_logging
from lencondb.middleware.rate_limiter import init_rate_limits
from lencondb.middleware.security_headers import init_security_headers
from lencondb.middleware.timing import init_request_timing
from lencondb.models import db
from lencondb.utils.errors import E, api_error

logger = logging.getLogger(__name__)


# ── SQLite FK enforcement (global engine event) ─────────────────────────
@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # no global limit — apply per-blueprint
    storage_uri=os.getenv("REDIS_URL", "memory://"),
)


def _register_error_handlers(app):
    """Map service exceptions and HTTP errors to the standard JSON body."""

    @app.errorhandler(NotFoundError)
    def _not_found_error(e):
        db.session.rollback()
        logger.info("Not found: %s", e)
        return api_error(E.NOT_FOUND, f"{e.resource} not found")

    @app.errorhandler(ValidationError)
    def _validation_error(e):
        db.session.rollback()
        code = E.VALIDATION_INVALID if e.status == 400 else E.BUSINESS_RULE
        return api_error(code, str(e), status=e.status, details=e.details)

    @app.errorhandler(ConflictError)
    def _conflict_error(e):
        db.session.rollback()
        code = E.CONFLICT_DUPLICATE if e.field else E.CONFLICT_STATE
        return api_error(code, str(e))

    @app.errorhandler(PermissionDeniedError)
    def _permission_error(e):
        db.session.rollback()
        return api_error(E.FORBIDDEN, str(e))

    @app.errorhandler(AuthenticationError)
    def _authentication_error(e):
        db.session.rollback()
        return api_error(E.UNAUTHORIZED, str(e))

    @app.errorhandler(404)
    def not_found(e):
        return api_error(E.NOT_FOUND, "Not found", details={"path": request.path})

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_error(E.METHOD_NOT_ALLOWED, "Method not allowed")

    @app.errorhandler(413)
    def payload_too_large(e):
        limit_mb = app.config["MAX_UPLOAD_SIZE"] // (1024 * 1024)
        return api_error(E.PAYLOAD_TOO_LARGE, f"Request body exceeds {limit_mb} MB")

    @app.errorhandler(429)
    def rate_limited(e):
        return api_error(E.RATE_LIMITED, "Too many requests",
                         details={"retry_after": e.description})

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")


def _register_cli(app):

    @app.cli.command("seed-demo")
    @click.option("--password", default="changeme123", show_default=True,
                  help="Password given to every demo user.")
    def seed_demo_cmd(password):
        """Seed demo users (one per role), two companies and a project."""
        from lencondb.models.user import ROLES, User
        from lencondb.services import company_service, project_service, user_service

        if User.query.count():
            click.echo("Database already has users; skipping seed.")
            return

        users = {}
        for n, role in enumerate(ROLES, start=1):
            users[role] = user_service.create_user({
                "first_name": role,
                "last_name": "Demo",
                "email": f"{role.lower()}@example.com",
                "phone": f"+7000000000{n}",
                "password": password,
                "role": role,
            })
        customer = company_service.create_company({"name": "Demo Customer", "type": "Customer"})
        company_service.create_company({"name": "Demo Contractor", "type": "Contractor"})
        project = project_service.create_project({
            "name": "Demo Project",
            "contract_date": "2026-01-15",
            "expiration_date": "2026-12-31",
            "customer_id": customer.id,
            "manager_id": users["Manager"].id,
        })
        project_service.add_user(project, users["Employee"].id)
        db.session.commit()
        logger.info("Seeded %d demo users and project %s", len(users), project.id)
        click.echo(f"Seeded {len(users)} users, 2 companies, 1 project.")


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # Instantiated so ProductionConfig can check its environment
    app.config.from_object(config[config_name]())
    app.config["MAX_CONTENT_LENGTH"] = app.config["MAX_UPLOAD_SIZE"]

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Middleware (order: headers, timing, auth) ────────────────────────
    init_security_headers(app)
    init_request_timing(app)
    init_jwt_middleware(app)

    # ── Import all models so Alembic can detect them ─────────────────────
    from lencondb.models import chat_log as _chat_log_models        # noqa: F401
    from lencondb.models import company as _company_models          # noqa: F401
    from lencondb.models import construction as _construction_models  # noqa: F401
    from lencondb.models import document as _document_models        # noqa: F401
    from lencondb.models import payment as _payment_models          # noqa: F401
    from lencondb.models import project as _project_models          # noqa: F401
    from lencondb.models import user as _user_models                # noqa: F401
    from lencondb.models import workload as _workload_models        # noqa: F401

    with app.app_context():
        if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") and \
                ":memory:" not in app.config["SQLALCHEMY_DATABASE_URI"]:
            os.makedirs(app.instance_path, exist_ok=True)
        db.create_all()
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    # ── Blueprints ───────────────────────────────────────────────────────
    from lencondb.blueprints.analytics_bp import analytics_bp
    from lencondb.blueprints.auth_bp import auth_bp
    from lencondb.blueprints.chat_log_bp import chat_log_bp
    from lencondb.blueprints.company_bp import company_bp
    from lencondb.blueprints.construction_bp import construction_bp
    from lencondb.blueprints.document_bp import document_bp
    from lencondb.blueprints.health_bp import health_bp
    from lencondb.blueprints.payment_schedule_bp import payment_schedule_bp
    from lencondb.blueprints.project_bp import project_bp
    from lencondb.blueprints.users_bp import users_bp
    from lencondb.blueprints.workload_actual_bp import workload_actual_bp
    from lencondb.blueprints.workload_plan_bp import workload_plan_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(company_bp)
    app.register_blueprint(project_bp)
    app.register_blueprint(construction_bp)
    app.register_blueprint(document_bp)
    app.register_blueprint(payment_schedule_bp)
    app.register_blueprint(workload_plan_bp)
    app.register_blueprint(workload_actual_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(chat_log_bp)

    _register_error_handlers(app)
    _register_cli(app)

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app
