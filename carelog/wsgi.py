"""WSGI entry point for the public blob endpoint (``gunicorn carelog.wsgi:app``)."""

from carelog.app import setup_logging
from carelog.db import db
from carelog.storage_web import create_storage_app

setup_logging()
app = create_storage_app(db)
