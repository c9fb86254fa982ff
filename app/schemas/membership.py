# app/schemas/membership.py
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.core.rbac import MembershipRole


class _Camel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MembershipGrant(_Camel):
    account_id: str
    role: MembershipRole


class MembershipOut(_Camel):
    account_id: str
    portal_id: str
    assigned_role: MembershipRole
    is_active: bool


class PermissionAuditEntry(_Camel):
    user_id: str
    email: Optional[str] = None
    role: MembershipRole
    is_active: bool
