"""
WSGI entry point and Flask-Migrate / Alembic target.

Usage:
    flask --app wsgi db upgrade
    flask --app wsgi seed-demo
    gunicorn wsgi:app
"""

from lencondb import create_app

app = create_app()
