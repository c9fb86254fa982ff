# app/api/deps.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from app.core.config import Settings, settings as _settings
from app.core.errors import Forbidden, TenantIdRequired, Unauthorized
from app.core.logging import get_logger
from app.core.rbac import (
    AccountRole,
    is_legacy_admin,
    is_superadmin,
    membership_grants_admin,
    parse_role,
    role_satisfies,
)
from app.core.tokens import decode_access
from app.crud.membership import membership_crud
from app.db.session import get_db
from app.schemas.token import Identity

log = get_logger(__name__)

__all__ = [
    "AdminContext",
    "get_bearer_token",
    "get_current_identity",
    "get_db",
    "get_settings",
    "require_min_role",
    "require_portal_admin",
]


def get_settings() -> Settings:
    return _settings

# ----------------------------------------------------------------------
# Bearer from the Authorization header (no OAuth2PasswordBearer)
# ----------------------------------------------------------------------
def get_bearer_token(authorization: Optional[str] = Header(None, alias="Authorization")) -> str:
    if not authorization:
        raise Unauthorized("Missing Authorization header")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthorized("Invalid Authorization header")
    return parts[1]

# ----------------------------------------------------------------------
# Access-token identity, attached to request.state
# ----------------------------------------------------------------------
def get_current_identity(
    request: Request,
    token: str = Depends(get_bearer_token),
    settings: Settings = Depends(get_settings),
) -> Identity:
    payload = decode_access(token, settings)
    if payload is None:
        raise Unauthorized()
    role = parse_role(str(payload["role"]))
    if role is None:
        raise Unauthorized()
    identity = Identity(account_id=str(payload["sub"]), role=role, portal_id=payload.get("portalId"))
    request.state.identity = identity
    return identity

# ----------------------------------------------------------------------
# Role-rank gate
# ----------------------------------------------------------------------
def require_min_role(required: AccountRole):
    def _gate(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not role_satisfies(identity.role, required):
            log.info("role_denied", account_id=identity.account_id, role=identity.role.value, required=required.value)
            raise Forbidden()
        return identity
    return _gate

# ----------------------------------------------------------------------
# Tenant-admin gate (X-Portal-ID header, else the token portalId)
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class AdminContext:
    identity: Identity
    portal_id: Optional[str]


def require_portal_admin(
    identity: Identity = Depends(get_current_identity),
    x_portal_id: Optional[str] = Header(None, alias="X-Portal-ID"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AdminContext:
    portal_id = (x_portal_id or "").strip() or identity.portal_id

    if is_superadmin(identity.role):
        return AdminContext(identity=identity, portal_id=portal_id)

    if not portal_id:
        raise TenantIdRequired()

    if settings.ALLOW_LEGACY_ADMIN_BYPASS and is_legacy_admin(identity.role):
        return AdminContext(identity=identity, portal_id=portal_id)

    link = membership_crud.get_for(db, identity.account_id, portal_id)
    if link is None or not membership_grants_admin(link.assigned_role, link.is_active):
        log.info("tenant_admin_denied", account_id=identity.account_id, portal_id=portal_id)
        raise Forbidden("Not an administrator of this portal")
    return AdminContext(identity=identity, portal_id=portal_id)
