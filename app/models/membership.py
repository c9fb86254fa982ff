# app/models/membership.py
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from app.db.base_class import Base

class PortalMembership(Base):
    __tablename__ = "portal_memberships"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    portal_id: Mapped[str] = mapped_column(ForeignKey("portals.id"), index=True)
    assigned_role: Mapped[str] = mapped_column(String(32))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="memberships")
    portal = relationship("Portal", back_populates="memberships")

    __table_args__ = (UniqueConstraint("user_id", "portal_id", name="uq_membership_user_portal"),)
