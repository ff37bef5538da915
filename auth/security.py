from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi import Depends, HTTPException, status
from config import config

import logging
import secrets

logger = logging.getLogger(__name__)

# Callers are other platform services (run lifecycle, dashboards), each with its own token
service_token_scheme = HTTPBearer(description="Service token listed in VALID_TOKENS.")


def _is_known_token(token: str) -> bool:
    return any(secrets.compare_digest(token, known) for known in config.valid_tokens)


def get_current_client(credentials: HTTPAuthorizationCredentials = Depends(service_token_scheme)) -> str:
    """Resolves the calling service from its bearer token, 401 for anything unknown."""
    if credentials.scheme.lower() == "bearer" and _is_known_token(credentials.credentials):
        return credentials.credentials

    logger.warning("rejected %s credentials", credentials.scheme)
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing Bearer token.",
        headers={"WWW-Authenticate": "Bearer"},
    )
