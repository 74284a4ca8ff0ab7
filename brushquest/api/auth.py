"""
Admin console login.
"""

import hmac
import logging

from fastapi import APIRouter

from ..models.requests import AuthRequest
from ..services.errors import AuthenticationError, ValidationError
from .dependencies import get_settings_instance

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["admin"])


@router.post("/admin/auth")
async def admin_auth(req: AuthRequest):
    """
    Check the admin shared password.

    Request body:
    {
        "password": "..."
    }
    """
    if not req.password:
        raise ValidationError("Password required")

    expected = get_settings_instance().admin_password
    if not hmac.compare_digest(req.password.encode(), expected.encode()):
        logger.warning("🔒 Admin login rejected")
        raise AuthenticationError("Invalid password")

    return {"success": True}
