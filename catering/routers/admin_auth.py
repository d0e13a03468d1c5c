from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from catering.core.config import Settings
from catering.deps import get_settings
from catering.schemas.admin import AdminLoginPayload
from catering.services.auth import authenticate_admin, create_admin_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin-auth"])


@router.post("/login")
def admin_login(payload: AdminLoginPayload, settings: Settings = Depends(get_settings)):
    email = str(payload.email).strip().lower()
    if not settings.admin_password_hash:
        logger.error("ADMIN_PASSWORD_HASH not set, admin login disabled")
    if not authenticate_admin(email, payload.password, settings):
        logger.warning("Admin login failed for %s", email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = create_admin_token(email, settings)
    logger.info("Admin login succeeded for %s", email)
    return {"message": "Login successful", "token": token, "email": email}

