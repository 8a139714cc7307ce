# app/models/membership.py
import uuid
from sqlalchemy import String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base_class import Base

class Membership(Base):
    """Role of a user on one client workspace."""
    __tablename__ = "memberships"
    __table_args__ = (UniqueConstraint("user_id", "client_id", name="uq_membership_user_client"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True)
    client_id: Mapped[str] = mapped_column(String(36), ForeignKey("clients.id"), index=True)
    role: Mapped[str] = mapped_column(String(20))

    user = relationship("User", back_populates="memberships")
    client = relationship("Client", back_populates="memberships", lazy="joined")
