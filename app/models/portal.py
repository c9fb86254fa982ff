# app/models/portal.py
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, func
from app.db.base_class import Base

class Portal(Base):
    __tablename__ = "portals"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name: Mapped[str] = mapped_column(String(160))
    subdomain: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    custom_domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    users = relationship("User", back_populates="portal")
    memberships = relationship("PortalMembership", back_populates="portal")
