"""
Admin key authentication for the scmbot maintenance endpoints.
"""

import hashlib
import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Request

from . import config

logger = logging.getLogger(__name__)

ADMIN_KEY_HEADER = "X-Admin-Key"


def generate_admin_key() -> str:
    """Generate a cryptographically secure admin key."""
    return secrets.token_urlsafe(32)


def hash_key(key: str) -> str:
    """Create a short SHA-256 fingerprint of a key for logging (never log raw keys)."""
    return hashlib.sha256(key.encode()).hexdigest()[:8]


def get_client_ip(request: Request) -> str:
    """Extract real client IP from request, handling proxies and load balancers."""
    forwarded_for = request.headers.get('X-Forwarded-For')
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, use the first one
        return forwarded_for.split(',')[0].strip()

    real_ip = request.headers.get('X-Real-IP')
    if real_ip:
        return real_ip.strip()

    return str(request.client.host) if request.client else "unknown"


def verify_admin_key(request: Request, expected_key: Optional[str] = None) -> None:
    """
    Reject the request with 401 unless it carries the configured admin key.

    Admin endpoints stay closed when no key is configured.
    """
    expected_key = expected_key if expected_key is not None else config.SCM_ADMIN_KEY
    provided = request.headers.get(ADMIN_KEY_HEADER, "")
    client_ip = get_client_ip(request)

    if not expected_key:
        logger.warning(f"[SECURITY] Admin request from {client_ip} rejected: no admin key configured")
        raise HTTPException(status_code=401, detail="Admin access is not configured")

    if not provided or not secrets.compare_digest(provided, expected_key):
        fingerprint = hash_key(provided) if provided else "none"
        logger.warning(f"[SECURITY] Invalid admin key from {client_ip} (fingerprint {fingerprint})")
        raise HTTPException(status_code=401, detail="Invalid admin key")
