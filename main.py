import uvicorn
import time
import logging
from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from webcompat_triage.api.reports import router as reports_router
from webcompat_triage.api.actions import router as actions_router
from webcompat_triage.api.status import router as status_router
from webcompat_triage.core.config import ALLOWED_CORS_ORIGINS, LISTEN_PORT, LOG_DIR, LOG_LEVEL
from webcompat_triage.utils.logging_config import setup_logging

setup_logging(level=LOG_LEVEL, log_dir=LOG_DIR)
logger = logging.getLogger("main")

app = FastAPI(title="Web Compatibility Report Triage Dashboard")

# ---------------------------------------------------------------------------
# Access Log Middleware
# ---------------------------------------------------------------------------
class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"
        user_agent = request.headers.get("user-agent", "-")
        referrer = request.headers.get("referer", "-")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = (time.time() - start_time) * 1000
            logger.error(f"Request failed: {request.method} {request.url.path} after {process_time:.2f}ms - Error: {str(e)}")
            raise

        process_time = (time.time() - start_time) * 1000
        logger.info(
            f"{client_host} \"{request.method} {request.url.path} HTTP/{request.scope.get('http_version', '1.1')}\" "
            f"{response.status_code} {process_time:.2f}ms referrer={referrer} user_agent={user_agent}"
        )
        return response

app.add_middleware(AccessLogMiddleware)

# ---------------------------------------------------------------------------
# CORS: credentialed requests from the dashboard frontend (no "*" origin)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(reports_router)
app.include_router(actions_router)
app.include_router(status_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=LISTEN_PORT)
