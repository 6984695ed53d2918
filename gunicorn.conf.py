"""Gunicorn config for the CoinsDash API."""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# The session lives in process memory, so a second worker would see a
# different set of reports. Keep a single uvicorn worker.
worker_class = "uvicorn.workers.UvicornWorker"
workers = 1
wsgi_app = "coinsdash.main:app"

# Large uploads are parsed in-request
timeout = 120
graceful_timeout = 30
keepalive = 65

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"
