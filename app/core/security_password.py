# app/core/security_password.py
from __future__ import annotations
import hashlib
from typing import Tuple
from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["argon2", "bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    argon2__time_cost=2,
    argon2__memory_cost=19456,
    argon2__parallelism=1,
)

# refresh tokens are 256-bit random values; a lighter argon2 setting is enough
token_context = CryptContext(
    schemes=["argon2"],
    argon2__time_cost=1,
    argon2__memory_cost=8192,
    argon2__parallelism=1,
)

# verified when the e-mail is unknown so both paths cost the same
DUMMY_PASSWORD_HASH = pwd_context.hash("this-user-does-not-exist")

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)

def verify_password(plain: str, stored_hash: str) -> bool:
    return pwd_context.verify(plain, stored_hash)

def verify_and_maybe_upgrade(plain: str, stored_hash: str) -> Tuple[bool, str | None]:
    ok = pwd_context.verify(plain, stored_hash)
    if not ok:
        return False, None
    if pwd_context.needs_update(stored_hash):
        return True, pwd_context.hash(plain)
    return True, None

def hash_refresh_token(raw: str) -> str:
    return token_context.hash(raw)

def verify_refresh_token(raw: str, token_hash: str) -> bool:
    return token_context.verify(raw, token_hash)

def refresh_lookup_hint(raw: str) -> str:
    """Non-secret discriminator used to narrow the candidate rows before hash comparison."""
    return hashlib.sha256(raw.encode()).hexdigest()[:16]
