# app/schemas/portal.py
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PortalBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    name: str = Field(min_length=1, max_length=160)
    subdomain: str = Field(min_length=1, max_length=64, pattern=r"^[a-z0-9][a-z0-9-]*$")
    custom_domain: Optional[str] = Field(default=None, max_length=255)


class PortalCreate(PortalBase):
    pass


class Portal(PortalBase):
    id: str
    created_at: Optional[datetime] = None
