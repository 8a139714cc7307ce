# app/services/auth.py
"""Session authentication manager.

Access tokens are stateless JWTs checked by signature only. Refresh tokens are
random opaque strings persisted as salted hashes, rotated on every use and
revoked en masse on logout.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InvalidOrExpiredRefreshToken, StaleUserOnPasswordChange
from app.core.security_password import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    hash_refresh_token,
    refresh_lookup_hint,
    verify_and_maybe_upgrade,
    verify_password,
    verify_refresh_token,
)
from app.core.tokens import create_access_token, new_refresh_token, refresh_expiry
from app.crud.refresh_token import refresh_token_crud
from app.crud.user import user_crud
from app.models.user import User

logger = logging.getLogger(__name__)

_PUBLIC_USER_FIELDS = ("id", "tenant_id", "email", "name", "role", "created_at")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _aware(dt: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo; everything is stored in UTC
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _public_user(user: User) -> Dict[str, Any]:
    return {f: getattr(user, f) for f in _PUBLIC_USER_FIELDS}


# ---------- credentials ----------

def validate_credential(db: Session, email: str, password: str) -> Optional[Dict[str, Any]]:
    """Return the user (without ``password_hash``) when the pair matches, else ``None``."""
    user = user_crud.get_by_email(db, email)
    if user is None:
        verify_password(password, DUMMY_PASSWORD_HASH)
        return None

    ok, new_hash = verify_and_maybe_upgrade(password, user.password_hash)
    if not ok:
        return None
    if new_hash:
        user.password_hash = new_hash
        db.add(user); db.commit(); db.refresh(user)
    return _public_user(user)


# ---------- token issuance ----------

def _issue_pair(db: Session, *, user_id: str, email: str, tenant_id: str) -> Dict[str, str]:
    access = create_access_token(sub=user_id, email=email, tenant_id=tenant_id)
    raw = new_refresh_token()
    refresh_token_crud.create(db, {
        "user_id": user_id,
        "token_hash": hash_refresh_token(raw),
        "lookup_hint": refresh_lookup_hint(raw),
        "expires_at": refresh_expiry(),
    })
    return {"access_token": access, "refresh_token": raw}


def login(db: Session, user: Dict[str, Any]) -> Dict[str, str]:
    """Issue a token pair for an already authenticated user."""
    if settings.SINGLE_SESSION_PER_USER:
        refresh_token_crud.delete_for_user(db, user["id"])
    pair = _issue_pair(db, user_id=user["id"], email=user["email"], tenant_id=user["tenant_id"])
    db.commit()
    logger.info("login user_id=%s tenant_id=%s", user["id"], user["tenant_id"])
    return pair


def refresh_token(db: Session, raw_token: str) -> Dict[str, str]:
    now = _now()
    candidates = refresh_token_crud.active_candidates(db, lookup_hint=refresh_lookup_hint(raw_token), now=now)

    match = None
    for rt in candidates:
        if verify_refresh_token(raw_token, rt.token_hash):
            match = rt
            break

    if match is None:
        raise InvalidOrExpiredRefreshToken()
    if _aware(match.expires_at) <= _now():
        raise InvalidOrExpiredRefreshToken()

    user = match.user
    user_id, email, tenant_id = user.id, user.email, user.tenant_id

    # consuming the matched row is the precondition for issuing a new pair:
    # a concurrent refresh with the same token finds nothing left to delete
    if refresh_token_crud.delete_one(db, match.id) != 1:
        db.rollback()
        raise InvalidOrExpiredRefreshToken()

    dropped = refresh_token_crud.delete_for_user(db, user_id)
    pair = _issue_pair(db, user_id=user_id, email=email, tenant_id=tenant_id)
    db.commit()
    logger.info("refresh rotated user_id=%s dropped_sessions=%d", user_id, dropped + 1)
    return pair


def logout(db: Session, user_id: str) -> None:
    n = refresh_token_crud.delete_for_user(db, user_id)
    db.commit()
    logger.info("logout user_id=%s revoked=%d", user_id, n)


def purge_expired(db: Session, now: Optional[datetime] = None) -> int:
    n = refresh_token_crud.purge_expired(db, now or _now())
    db.commit()
    return n


# ---------- profile ----------

def get_profile(db: Session, user_id: str) -> Optional[Dict[str, Any]]:
    user = user_crud.get(db, user_id)
    if user is None:
        return None
    return {
        **_public_user(user),
        "memberships": [
            {"client_id": m.client_id, "client_name": m.client.name if m.client else None, "role": m.role}
            for m in user.memberships
        ],
    }


def update_me(
    db: Session,
    user_id: str,
    *,
    name: Optional[str] = None,
    current_password: Optional[str] = None,
    new_password: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    user = user_crud.get(db, user_id)
    changes: Dict[str, Any] = {}
    if name is not None:
        changes["name"] = name

    if new_password is not None:
        if user is None or not current_password:
            raise StaleUserOnPasswordChange()
        if not verify_password(current_password, user.password_hash):
            raise StaleUserOnPasswordChange()
        changes["password_hash"] = hash_password(new_password)

    if user is None:
        return None
    if changes:
        user_crud.update(db, user, changes)
    return get_profile(db, user_id)
