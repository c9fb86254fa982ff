# app/crud/membership.py
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from app.crud.base import CRUDBase
from app.core.rbac import MembershipRole
from app.models.membership import PortalMembership
from app.schemas.membership import MembershipGrant

class CRUDMembership(CRUDBase[PortalMembership, MembershipGrant, MembershipGrant]):
    def get_for(self, db: Session, user_id: str, portal_id: str) -> Optional[PortalMembership]:
        return db.execute(
            select(PortalMembership).where(
                PortalMembership.user_id == user_id,
                PortalMembership.portal_id == portal_id,
            )
        ).scalar_one_or_none()

    def grant(self, db: Session, *, user_id: str, portal_id: str, role: MembershipRole) -> PortalMembership:
        """Creates or reactivates the single (user, portal) row."""
        link = self.get_for(db, user_id, portal_id)
        if link is None:
            link = PortalMembership(user_id=user_id, portal_id=portal_id)
        link.assigned_role = role.value
        link.is_active = True
        db.add(link); db.commit(); db.refresh(link)
        return link

    def deactivate(self, db: Session, link: PortalMembership) -> PortalMembership:
        return self.update(db, link, {"is_active": False})

    def list_for_portal(self, db: Session, portal_id: str, limit: int = 500) -> List[PortalMembership]:
        stmt = (
            select(PortalMembership)
            .options(selectinload(PortalMembership.user))
            .where(PortalMembership.portal_id == portal_id)
            .order_by(PortalMembership.id)
            .limit(limit)
        )
        return list(db.scalars(stmt).all())

membership_crud = CRUDMembership(PortalMembership)
