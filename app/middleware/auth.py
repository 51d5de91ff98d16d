"""
API key check for endpoints that change state
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from core.config import Config

logger = logging.getLogger(__name__)


def verify_api_key(x_api_key: Optional[str] = Header(None, alias="X-API-Key")):
    """
    Validate the X-API-Key header against the API_KEY environment variable

    If no API key is configured, all requests are allowed (for local development).

    Args:
        x_api_key: API key from X-API-Key header

    Raises:
        HTTPException: If API key is invalid or missing
    """
    required_api_key = Config.get_api_key()

    if not required_api_key:
        return

    if not x_api_key or x_api_key != required_api_key:
        logger.warning("🔒 Rejected request with invalid or missing API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key"
        )
