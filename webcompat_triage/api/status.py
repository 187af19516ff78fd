"""
GET /__version__, /app/version.json — Dockerflow version object
GET /__heartbeat__, /__lbheartbeat__ — liveness probes for the load balancer
"""
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from webcompat_triage.core.config import APP_BUILD, APP_COMMIT, APP_VERSION, SOURCE_REPOSITORY

router = APIRouter(tags=["Status"])


@router.get("/__version__")
@router.get("/app/version.json")
async def get_version():
    # https://github.com/mozilla-services/Dockerflow/blob/main/docs/version_object.md
    return {
        "source": SOURCE_REPOSITORY,
        "version": APP_VERSION,
        "commit": APP_COMMIT,
        "build": APP_BUILD,
    }


@router.get("/__heartbeat__", response_class=PlainTextResponse)
@router.get("/__lbheartbeat__", response_class=PlainTextResponse)
async def heartbeat():
    return "success"
