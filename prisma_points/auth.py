"""
API key guard for the /api routes.
The portal front end sends the shared key in the X-API-Key header.
"""
import logging
import os
import secrets
from typing import Optional

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

logger = logging.getLogger("prisma_points.auth")

# Override in production
API_KEY = os.getenv("PRISMA_POINTS_API_KEY", "prisma-points-dev-key")

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(request: Request, api_key: Optional[str] = Security(api_key_header)) -> str:
    """Reject requests without the portal API key"""
    if not api_key or not secrets.compare_digest(api_key.encode(), API_KEY.encode()):
        # Client address is logged for fail2ban
        client = request.client.host if request.client else "unknown"
        logger.warning(f"Rejected API key from {client} on {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key"
        )
    return api_key
