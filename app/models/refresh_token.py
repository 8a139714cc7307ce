# app/models/refresh_token.py
from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, ForeignKey, func
from app.db.base_class import Base

class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # no uniqueness on user_id: one row per logged-in device
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True)
    # only the salted hash of the raw token is ever stored
    token_hash: Mapped[str] = mapped_column(String(255))
    lookup_hint: Mapped[str | None] = mapped_column(String(16), index=True, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="refresh_tokens")
