from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime

from cbt.schemas.base import CamelModel


class ReferenceCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class SessionCreate(ReferenceCreate):
    name: str = Field(..., min_length=1, max_length=20, description="Academic year, e.g. 2024/2025")
    is_current: bool = False


class ReferenceItem(CamelModel):
    id: str
    name: str
    created_at: Optional[datetime] = None


class SessionItem(ReferenceItem):
    is_current: bool = False
