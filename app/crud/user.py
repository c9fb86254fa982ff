# app/crud/user.py
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.user import User
from app.schemas.user import RegisterRequest

from app.core.rbac import AccountRole
from app.core.security_password import hash_password

def normalize_email(email: str) -> str:
    return (email or "").strip().lower()

class CRUDUser(CRUDBase[User, RegisterRequest, RegisterRequest]):
    def create(self, db: Session, obj_in: RegisterRequest, extra=None) -> User:
        user = User(
            email=normalize_email(obj_in.email),
            username=(obj_in.username or "").strip() or None,
            password_hash=hash_password(obj_in.password),
            portal_id=obj_in.portal_id,
            role=obj_in.role or AccountRole.VIEWER.value,
        )
        for k, v in (extra or {}).items():
            setattr(user, k, v)
        db.add(user); db.commit(); db.refresh(user)
        return user

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.execute(select(User).where(User.email == normalize_email(email))).scalar_one_or_none()

    def get_by_identifier(self, db: Session, identifier: str) -> Optional[User]:
        """Email first, then username; a username never shadows another account's email."""
        user = self.get_by_email(db, identifier)
        if user is not None:
            return user
        name = (identifier or "").strip()
        if not name:
            return None
        return db.execute(select(User).where(User.username == name)).scalar_one_or_none()

    def exists(self, db: Session, email: str, username: Optional[str]) -> bool:
        if self.get_by_email(db, email) is not None:
            return True
        if username:
            return db.execute(select(User.id).where(User.username == username.strip())).first() is not None
        return False

    def list_page(self, db: Session, *, portal_id: Optional[str], page: int, page_size: int) -> tuple[List[User], int]:
        filters = {"portal_id": portal_id} if portal_id else {}
        stmt = (
            select(User)
            .filter_by(**filters)
            .order_by(User.created_at.desc(), User.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(db.scalars(stmt).all()), self.count(db, **filters)

user_crud = CRUDUser(User)
