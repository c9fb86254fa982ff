# app/crud/portal.py
from app.crud.base import CRUDBase
from app.models.portal import Portal
from app.schemas.portal import PortalCreate, PortalBase

portal_crud = CRUDBase[Portal, PortalCreate, PortalBase](Portal)
