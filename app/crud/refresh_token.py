# app/crud/refresh_token.py
from datetime import datetime
from typing import List
from sqlalchemy import select, delete, func, or_
from sqlalchemy.orm import Session, joinedload
from app.crud.base import CRUDBase
from app.models.refresh_token import RefreshToken

class CRUDRefreshToken(CRUDBase[RefreshToken]):
    def active_candidates(self, db: Session, *, lookup_hint: str, now: datetime) -> List[RefreshToken]:
        # rows written before lookup_hint existed are still matched by hash
        stmt = (
            select(RefreshToken)
            .options(joinedload(RefreshToken.user))
            .where(
                RefreshToken.expires_at > now,
                or_(RefreshToken.lookup_hint == lookup_hint, RefreshToken.lookup_hint.is_(None)),
            )
        )
        return list(db.scalars(stmt).unique().all())

    def delete_one(self, db: Session, token_id: str) -> int:
        res = db.execute(delete(RefreshToken).where(RefreshToken.id == token_id))
        return res.rowcount or 0

    def delete_for_user(self, db: Session, user_id: str) -> int:
        res = db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
        return res.rowcount or 0

    def purge_expired(self, db: Session, now: datetime) -> int:
        stmt = delete(RefreshToken).where(RefreshToken.expires_at <= now)
        res = db.execute(stmt.execution_options(synchronize_session=False))
        return res.rowcount or 0

    def count_for_user(self, db: Session, user_id: str) -> int:
        stmt = select(func.count()).select_from(RefreshToken).where(RefreshToken.user_id == user_id)
        return db.scalar(stmt) or 0

refresh_token_crud = CRUDRefreshToken(RefreshToken)
