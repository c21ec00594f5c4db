"""Gunicorn configuration for serving uploaded pet photos (carelog.wsgi:app)."""

import os

# Server socket
bind = os.getenv("STORAGE_BIND", "0.0.0.0:5000")
backlog = 2048

# Default to 2 workers (can be overridden via GUNICORN_WORKERS env var)
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "sync"
timeout = 30
keepalive = 2

# Logging
accesslog = "-"
errorlog = "-"
log_level = os.getenv("LOG_LEVEL", "INFO").lower()
loglevel = log_level if log_level in ["debug", "info", "warning", "error", "critical"] else "info"

proc_name = "carelog-storage"

preload_app = True
max_requests = 1000
max_requests_jitter = 50
