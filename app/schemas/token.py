# app/schemas/token.py
from __future__ import annotations
from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.rbac import AccountRole


class Identity(BaseModel):
    """Decoded access-token identity attached to an admitted request."""
    model_config = ConfigDict(frozen=True)

    account_id: str
    role: AccountRole
    portal_id: Optional[str] = None


class LoginRequest(BaseModel):
    identifier: str = Field(min_length=1, validation_alias=AliasChoices("identifier", "emailOrUsername", "email"))
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    refresh_token: str = Field(min_length=1)


class TokenPair(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int


class MeOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    role: AccountRole
    portal_id: Optional[str] = None
