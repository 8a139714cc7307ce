# app/crud/user.py
from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.user import User
from app.models.membership import Membership
from app.models.client import Client

def normalize_email(email: str) -> str:
    return (email or "").strip().lower()

class CRUDUser(CRUDBase[User]):
    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.execute(select(User).where(User.email == normalize_email(email))).scalar_one_or_none()

    def get_in_tenant(self, db: Session, user_id: str, tenant_id: str) -> Optional[User]:
        return db.execute(
            select(User).where(User.id == user_id, User.tenant_id == tenant_id)
        ).scalar_one_or_none()

    def has_admin_membership(self, db: Session, user_id: str, tenant_id: str) -> bool:
        row = db.execute(
            select(Membership.id)
            .join(Client, Client.id == Membership.client_id)
            .where(Membership.user_id == user_id, Membership.role == "admin", Client.tenant_id == tenant_id)
            .limit(1)
        ).first()
        return row is not None

user_crud = CRUDUser(User)
