# app/core/tokens.py
from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError
from app.core.config import settings

def _now() -> datetime:
    return datetime.now(timezone.utc)

def _exp(minutes: int) -> datetime:
    return _now() + timedelta(minutes=minutes)

def refresh_expiry() -> datetime:
    return _now() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

def create_access_token(*, sub: str, email: str, tenant_id: str) -> str:
    """Stateless access token; validity is checked by signature and ``exp`` only."""
    payload: Dict[str, Any] = {
        "type": "access",
        "sub": sub,
        "email": email,
        "tenantId": tenant_id,
        "jti": uuid.uuid4().hex,
        "iat": int(_now().timestamp()),
        "exp": int(_exp(settings.ACCESS_TOKEN_EXPIRE_MINUTES).timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_access(token: str) -> Optional[Dict[str, Any]]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if not isinstance(payload, dict):
        return None
    if payload.get("type") != "access":
        return None
    if not payload.get("sub") or not payload.get("tenantId"):
        return None
    return payload

def new_refresh_token() -> str:
    # 32 bytes -> 64 hex chars
    return secrets.token_hex(settings.REFRESH_TOKEN_BYTES)
