import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sitemapcrawl.config import get_optional_str_env

logger = logging.getLogger(__name__)

ADMIN_TOKEN_ENV = "ADMIN_TOKEN"

# Bearer token guard for the sitemap endpoints. Without ADMIN_TOKEN every
# guarded endpoint answers 503.
security = HTTPBearer()


def check_admin_token(candidate: Optional[str]) -> str:
    """Compare `candidate` with the configured admin token and return the token.

    Raises HTTPException 503 when no token is configured, 401 on mismatch.
    """
    admin = get_optional_str_env(ADMIN_TOKEN_ENV)
    if not admin:
        logger.error("%s not set; sitemap endpoints are disabled", ADMIN_TOKEN_ENV)
        raise HTTPException(status_code=503, detail="ADMIN_TOKEN not configured")
    if not secrets.compare_digest(candidate or "", admin):
        logger.warning("Rejected request with invalid admin token")
        raise HTTPException(status_code=401, detail="Unauthorized")
    return admin


def require_admin(creds: HTTPAuthorizationCredentials = Security(security)) -> bool:
    check_admin_token(creds.credentials if creds is not None else None)
    return True
