# app/core/rbac.py
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.crud.user import user_crud
from app.models.user import ROLE_ADMIN, User
from app.schemas.auth import AccessClaims

def require_tenant_member(
    claims: AccessClaims = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """The caller must still exist and still belong to the tenant named in its token."""
    user = user_crud.get(db, claims.id)
    if not user or user.tenant_id != claims.tenant_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid tenant access")
    return user

def require_tenant_admin(
    user: User = Depends(require_tenant_member),
    db: Session = Depends(get_db),
) -> User:
    # User.role == admin, or admin membership on any client of the tenant
    if user.role == ROLE_ADMIN:
        return user
    if not user_crud.has_admin_membership(db, user.id, user.tenant_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
