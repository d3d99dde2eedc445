"""
Runtime configuration, read once from the environment at import time.

Every setting has a default that works for local development:

    uvicorn eudr_api.main:app --reload

Set EUDR_SEED_DEMO_DATA=1 to start with the demo suppliers, declarations,
tasks and the admin/password123 login. It is off by default so a real
deployment never comes up full of fixtures.
"""

import os


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


VERSION = "0.1.0"

# Signs the session cookie. Override in every non-local environment.
SESSION_SECRET = os.getenv("EUDR_SESSION_SECRET", "eudr-compliance-app-secret")
SESSION_COOKIE = os.getenv("EUDR_SESSION_COOKIE", "eudr_session")
SESSION_HTTPS_ONLY = _flag("EUDR_SESSION_HTTPS_ONLY")
SESSION_MAX_AGE = int(os.getenv("EUDR_SESSION_MAX_AGE", str(24 * 60 * 60)))

SEED_DEMO_DATA = _flag("EUDR_SEED_DEMO_DATA")

# Comma-separated. "*" is only sensible for local demos.
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("EUDR_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("EUDR_LOG_LEVEL", "INFO").upper()

# How many items each dashboard panel shows.
DASHBOARD_LIST_LIMIT = int(os.getenv("EUDR_DASHBOARD_LIST_LIMIT", "4"))
