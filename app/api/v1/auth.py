# app/api/v1/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.core.exceptions import InvalidCredential
from app.schemas.auth import AccessClaims, LoginRequest, Message, RefreshRequest, TokenPair
from app.schemas.user import ProfileOut, UpdateMeRequest
from app.services import auth as auth_service

router = APIRouter()

@router.post("/login", response_model=TokenPair)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.validate_credential(db, body.email, body.password)
    if not user:
        raise InvalidCredential()
    return auth_service.login(db, user)

@router.post("/refresh", response_model=TokenPair)
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    return auth_service.refresh_token(db, body.refresh_token)

@router.post("/logout", response_model=Message)
def logout(claims: AccessClaims = Depends(get_current_user), db: Session = Depends(get_db)):
    auth_service.logout(db, claims.id)
    return {"message": "Logged out successfully"}

@router.get("/me", response_model=ProfileOut)
def get_me(claims: AccessClaims = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = auth_service.get_profile(db, claims.id)
    if not profile:
        raise InvalidCredential()
    return profile

@router.patch("/me", response_model=ProfileOut)
def update_me(
    body: UpdateMeRequest,
    claims: AccessClaims = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile = auth_service.update_me(
        db,
        claims.id,
        name=body.name,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    if not profile:
        raise InvalidCredential()
    return profile
