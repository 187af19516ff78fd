"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    BQ_PROJECT_ID            — Google Cloud project the BigQuery client bills to
    LOG_LEVEL                — Root log level (default: INFO)
    LOG_DIR                  — Directory for the daily log file (default: logs)
    LISTEN_PORT              — Port uvicorn binds to (default: 3000)
    FRONTEND_WEB_ROOT        — Origin of the dashboard frontend (CORS)
    ADDITIONAL_CORS_ORIGINS  — Comma separated extra CORS origins (localhost dev)
    SKIP_AUTH                — "true" disables the write allowlist (local dev only)
    WRITE_ACCESS_ALLOWLIST   — Comma separated e-mails allowed to call write endpoints
                               (falls back to MOZLDAP_STATE_ACCESS)
    WORKER_POLL_INTERVAL     — Seconds between liveness checks while awaiting a worker

Worker Model:
    Every report request spawns its own transform worker process with its own
    response pipe. WORKER_POLL_INTERVAL only controls how quickly a crashed
    worker is noticed; results are delivered as soon as they are posted.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> list[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


BQ_PROJECT_ID = os.getenv("BQ_PROJECT_ID")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "logs")

LISTEN_PORT = int(os.getenv("LISTEN_PORT", 3000))

# CORS
FRONTEND_WEB_ROOT = os.getenv("FRONTEND_WEB_ROOT", "")
ADDITIONAL_CORS_ORIGINS = _split_csv(os.getenv("ADDITIONAL_CORS_ORIGINS", ""))
ALLOWED_CORS_ORIGINS: list[str] = [
    origin for origin in [FRONTEND_WEB_ROOT.lower(), *ADDITIONAL_CORS_ORIGINS] if origin
]

# Write access gate
SKIP_AUTH = os.getenv("SKIP_AUTH", "false").lower() == "true"


def load_write_access_allowlist() -> list[str]:
    # MOZLDAP_STATE_ACCESS is the name older deployments use
    raw = os.getenv("WRITE_ACCESS_ALLOWLIST") or os.getenv("MOZLDAP_STATE_ACCESS", "")
    return _split_csv(raw)


WRITE_ACCESS_ALLOWLIST = load_write_access_allowlist()

# Worker
WORKER_POLL_INTERVAL = float(os.getenv("WORKER_POLL_INTERVAL", 0.25))

# Dockerflow version object
SOURCE_REPOSITORY = os.getenv("SOURCE_REPOSITORY", "https://github.com/webcompat/wckbng-dashboard")
APP_VERSION = os.getenv("APP_VERSION", "dev")
APP_COMMIT = os.getenv("APP_COMMIT", "unknown")
APP_BUILD = os.getenv("APP_BUILD", "unknown")
