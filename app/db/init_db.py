# app/db/init_db.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.logging import get_logger
from app.core.rbac import AccountRole, MembershipRole
from app.core.security_password import hash_password
from app.models.membership import PortalMembership
from app.models.portal import Portal
from app.models.user import User

log = get_logger(__name__)

DEMO_SUBDOMAIN = "test"
ADMIN_EMAIL = "admin@example.com"

def init_db(db: Session, settings: Settings) -> None:
    """Idempotent seed: demo portal plus a global admin who also administers it."""
    portal = db.scalar(select(Portal).where(Portal.subdomain == DEMO_SUBDOMAIN))
    if not portal:
        portal = Portal(name="Test Portal", subdomain=DEMO_SUBDOMAIN)
        db.add(portal); db.flush()

    admin = db.scalar(select(User).where(User.email == ADMIN_EMAIL))
    if not admin:
        admin = User(
            portal_id=portal.id,
            email=ADMIN_EMAIL,
            username="admin",
            password_hash=hash_password(settings.SEED_ADMIN_PASSWORD),
            role=AccountRole.ADMIN.value,
            is_active=True,
            email_verified=True,
        )
        db.add(admin); db.flush()
        db.add(PortalMembership(
            user_id=admin.id,
            portal_id=portal.id,
            assigned_role=MembershipRole.PORTAL_ADMIN.value,
            is_active=True,
        ))
        log.info("seed_admin_created", email=ADMIN_EMAIL, portal_id=portal.id)

    db.commit()
