"""
LenconDB
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name])
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

# Default SQLite path for local dev when PostgreSQL is not running
_SQLITE_DEV = f"sqlite:///{os.path.join(basedir, 'instance', 'lencondb_dev.db')}"
_SQLITE_TEST = "sqlite:///:memory:"

# Random keys for development; production MUST use stable env vars
_DEV_SECRET = secrets.token_hex(32)
_DEV_ACCESS_SECRET = secrets.token_hex(32)
_DEV_REFRESH_SECRET = secrets.token_hex(32)


def _database_url(default=None):
    # Railway/Heroku use postgres:// but SQLAlchemy 2.0 requires postgresql://
    raw = os.getenv("DATABASE_URL", "")
    return raw.replace("postgres://", "postgresql://", 1) if raw else default


class Config:
    """Base configuration shared across all environments."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    DEBUG = False
    TESTING = False

    # SQLAlchemy
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,   # recycle connections every 5 min
    }

    # JWT
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", _DEV_ACCESS_SECRET)
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", _DEV_REFRESH_SECRET)
    JWT_ACCESS_EXPIRES = int(os.getenv("JWT_ACCESS_EXPIRES", "900"))        # 15 minutes
    JWT_REFRESH_EXPIRES = int(os.getenv("JWT_REFRESH_EXPIRES", "604800"))   # 7 days

    BCRYPT_ROUNDS = 12

    # Document storage
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(basedir, "uploads"))
    MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(50 * 1024 * 1024)))   # 50 MB

    # Rate-limit storage (Redis in production, memory for dev)
    REDIS_URL = os.getenv("REDIS_URL", "memory://")

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    SQLALCHEMY_DATABASE_URI = _database_url(_SQLITE_DEV)


class TestingConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", _SQLITE_TEST)
    RATELIMIT_ENABLED = False
    # Fast hashing keeps the suite quick
    BCRYPT_ROUNDS = 4
    JWT_ACCESS_SECRET = "test-access-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    SQLALCHEMY_DATABASE_URI = _database_url()
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 300,
        "pool_timeout": 20,
    }

    def __init__(self):
        if not self.SQLALCHEMY_DATABASE_URI:
            raise RuntimeError("DATABASE_URL environment variable is required in production")
        for name in ("SECRET_KEY", "JWT_ACCESS_SECRET", "JWT_REFRESH_SECRET"):
            if not os.getenv(name):
                raise RuntimeError(f"{name} environment variable must be set in production")


# Configuration mapping: environment name -> config class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
