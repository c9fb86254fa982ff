# app/api/v1/portals.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_min_role
from app.core.errors import NotFound
from app.core.logging import get_logger
from app.core.rbac import AccountRole
from app.crud.portal import portal_crud
from app.models.portal import Portal as PortalModel
from app.schemas.portal import Portal as PortalOut, PortalCreate
from app.schemas.token import Identity

router = APIRouter()
log = get_logger(__name__)

@router.get("", response_model=List[PortalOut], dependencies=[Depends(require_min_role(AccountRole.VIEWER))])
def list_portals(db: Session = Depends(get_db)):
    return db.scalars(select(PortalModel).order_by(PortalModel.name)).all()

@router.get("/{portal_id}", response_model=PortalOut, dependencies=[Depends(require_min_role(AccountRole.VIEWER))])
def get_portal(portal_id: str, db: Session = Depends(get_db)):
    p = portal_crud.get(db, portal_id)
    if not p:
        raise NotFound("Portal not found")
    return p

@router.post("", response_model=PortalOut, status_code=status.HTTP_201_CREATED)
def create_portal(
    payload: PortalCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_min_role(AccountRole.SUPERADMIN)),
):
    # duplicate subdomains surface as IntegrityError -> 409
    p = portal_crud.create(db, payload)
    log.info("portal_created", portal_id=p.id, subdomain=p.subdomain, account_id=identity.account_id)
    return p
