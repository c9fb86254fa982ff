# app/schemas/user.py
from __future__ import annotations
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.rbac import AccountRole

# Self-registration never grants admin ranks; those are assigned by an administrator.
SelfAssignableRole = Literal["viewer", "editor"]


class _Camel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RegisterRequest(_Camel):
    email: str = Field(min_length=3, max_length=160)
    username: Optional[str] = Field(default=None, min_length=1, max_length=80)
    password: str = Field(min_length=8, max_length=128)
    portal_id: str
    role: Optional[SelfAssignableRole] = None


class RegisterOut(_Camel):
    id: str
    email: str


class ForgotPasswordRequest(BaseModel):
    email: str = Field(min_length=1)


class ForgotPasswordOut(_Camel):
    ok: bool = True
    reset_token: Optional[str] = None


class ResetPasswordRequest(_Camel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=8, max_length=128)


class OkOut(BaseModel):
    ok: bool = True


class UserOut(_Camel):
    id: str
    email: str
    username: Optional[str] = None
    role: AccountRole
    portal_id: str
    is_active: bool
    created_at: Optional[datetime] = None


class UserPage(_Camel):
    items: List[UserOut]
    page: int
    page_size: int
    total: int
