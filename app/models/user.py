# app/models/user.py
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Boolean, DateTime, ForeignKey, String, func
from app.db.base_class import Base
from app.core.rbac import AccountRole

class User(Base):
    """An account able to authenticate. Only the bcrypt hash of the password is stored."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    portal_id: Mapped[str] = mapped_column(ForeignKey("portals.id"), index=True)

    email: Mapped[str] = mapped_column(String(160), unique=True, index=True)
    username: Mapped[Optional[str]] = mapped_column(String(80), unique=True, nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(20), default=AccountRole.VIEWER.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    portal = relationship("Portal", back_populates="users")
    memberships = relationship("PortalMembership", back_populates="user")
