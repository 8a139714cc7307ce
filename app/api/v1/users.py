# app/api/v1/users.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.rbac import require_tenant_admin
from app.crud.user import user_crud
from app.models.user import User
from app.schemas.auth import Message
from app.services import auth as auth_service

router = APIRouter()

@router.post("/{user_id}/logout", response_model=Message)
def force_logout(
    user_id: str = Path(...),
    admin: User = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
):
    """Revoke every refresh token of a user in the admin's tenant."""
    target = user_crud.get_in_tenant(db, user_id, admin.tenant_id)
    if not target:
        raise HTTPException(status_code=404, detail=f'User with id "{user_id}" not found')
    auth_service.logout(db, target.id)
    return {"message": "Sessions revoked"}
