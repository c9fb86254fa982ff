# app/api/v1/admin.py
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import AdminContext, get_db, require_portal_admin
from app.core.errors import Forbidden, NotFound, TenantIdRequired
from app.core.logging import get_logger
from app.core.rbac import MembershipRole, is_superadmin
from app.crud.membership import membership_crud
from app.crud.portal import portal_crud
from app.crud.user import user_crud
from app.models.membership import PortalMembership
from app.schemas.membership import MembershipGrant, MembershipOut, PermissionAuditEntry
from app.schemas.user import UserOut, UserPage

router = APIRouter()
log = get_logger(__name__)

def _membership_out(link: PortalMembership) -> MembershipOut:
    return MembershipOut(
        account_id=link.user_id,
        portal_id=link.portal_id,
        assigned_role=link.assigned_role,
        is_active=link.is_active,
    )

def _require_portal(ctx: AdminContext) -> str:
    # superadmins may pass the gate without a portal; writes still need one
    if not ctx.portal_id:
        raise TenantIdRequired()
    return ctx.portal_id

def _can_grant(db: Session, ctx: AdminContext, portal_id: str, role: MembershipRole) -> bool:
    # SUPER_ADMIN is only handed out by a superadmin or an active SUPER_ADMIN of the portal
    if role is not MembershipRole.SUPER_ADMIN or is_superadmin(ctx.identity.role):
        return True
    own = membership_crud.get_for(db, ctx.identity.account_id, portal_id)
    return own is not None and own.is_active and own.assigned_role == MembershipRole.SUPER_ADMIN.value

@router.get("/users", response_model=UserPage)
def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    ctx: AdminContext = Depends(require_portal_admin),
    db: Session = Depends(get_db),
):
    items, total = user_crud.list_page(db, portal_id=ctx.portal_id, page=page, page_size=page_size)
    return UserPage(
        items=[UserOut.model_validate(u) for u in items],
        page=page,
        page_size=page_size,
        total=total,
    )

@router.get("/permissions/audit", response_model=List[PermissionAuditEntry])
def permissions_audit(
    ctx: AdminContext = Depends(require_portal_admin),
    db: Session = Depends(get_db),
):
    portal_id = _require_portal(ctx)
    return [
        PermissionAuditEntry(
            user_id=link.user_id,
            email=link.user.email if link.user else None,
            role=link.assigned_role,
            is_active=link.is_active,
        )
        for link in membership_crud.list_for_portal(db, portal_id)
    ]

@router.put("/memberships", response_model=MembershipOut)
def grant_membership(
    payload: MembershipGrant,
    ctx: AdminContext = Depends(require_portal_admin),
    db: Session = Depends(get_db),
):
    portal_id = _require_portal(ctx)
    if portal_crud.get(db, portal_id) is None:
        raise NotFound("Portal not found")
    if user_crud.get(db, payload.account_id) is None:
        raise NotFound("Account not found")
    if not _can_grant(db, ctx, portal_id, payload.role):
        log.info("membership_grant_denied", portal_id=portal_id, role=payload.role.value,
                 granted_by=ctx.identity.account_id)
        raise Forbidden("Only a super admin may grant SUPER_ADMIN")
    link = membership_crud.grant(db, user_id=payload.account_id, portal_id=portal_id, role=payload.role)
    log.info("membership_granted", portal_id=portal_id, account_id=payload.account_id,
             role=payload.role.value, granted_by=ctx.identity.account_id)
    return _membership_out(link)

@router.delete("/memberships/{account_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def revoke_membership(
    account_id: str,
    ctx: AdminContext = Depends(require_portal_admin),
    db: Session = Depends(get_db),
):
    portal_id = _require_portal(ctx)
    link = membership_crud.get_for(db, account_id, portal_id)
    if link is None:
        raise NotFound("Membership not found")
    membership_crud.deactivate(db, link)
    log.info("membership_deactivated", portal_id=portal_id, account_id=account_id,
             revoked_by=ctx.identity.account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
