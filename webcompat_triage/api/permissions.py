"""
Write Permissions
=================
FastAPI dependency guarding the mutation endpoints.

The identity-aware proxy in front of the dashboard forwards the signed-in
user's e-mail in the `oidc-claim-user-profile-email` header. Writes are
allowed only for e-mails in WRITE_ACCESS_ALLOWLIST.

    SKIP_AUTH=true        → every request allowed (local development)
    header missing        → 401
    allowlist empty       → 403 (and an error log, misconfiguration)
    e-mail not allowlisted → 403
"""
import logging
from typing import Optional

from fastapi import Header, HTTPException

from webcompat_triage.core.config import SKIP_AUTH, WRITE_ACCESS_ALLOWLIST

logger = logging.getLogger(__name__)

EMAIL_HEADER = "oidc-claim-user-profile-email"


async def require_write_access(
    claim_email: Optional[str] = Header(None, alias=EMAIL_HEADER),
) -> None:
    if SKIP_AUTH:
        return

    if not claim_email:
        raise HTTPException(status_code=401, detail="unauthorized")

    if not WRITE_ACCESS_ALLOWLIST:
        logger.error("WRITE_ACCESS_ALLOWLIST is not set, all authenticated writes will fail!")
        raise HTTPException(status_code=403, detail="user not allowed")

    if claim_email.strip().lower() not in WRITE_ACCESS_ALLOWLIST:
        raise HTTPException(status_code=403, detail="user not allowed")
