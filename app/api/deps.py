# app/api/deps.py
from fastapi import Depends, Header, HTTPException

from app.db.session import get_db
from app.core.tokens import decode_access
from app.schemas.auth import AccessClaims

__all__ = ["get_db", "get_bearer_token", "get_current_user"]

_BEARER = {"WWW-Authenticate": "Bearer"}

# ----------------------------------------------------------------------
# Bearer from the Authorization header (no OAuth2PasswordBearer)
# ----------------------------------------------------------------------
def get_bearer_token(authorization: str = Header(None, alias="Authorization")) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header", headers=_BEARER)
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid Authorization header", headers=_BEARER)
    return parts[1]

# ----------------------------------------------------------------------
# Stateless: signature + exp only, no database lookup
# ----------------------------------------------------------------------
def get_current_user(token: str = Depends(get_bearer_token)) -> AccessClaims:
    payload = decode_access(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid token", headers=_BEARER)
    return AccessClaims(id=payload["sub"], email=payload.get("email") or "", tenant_id=payload["tenantId"])
