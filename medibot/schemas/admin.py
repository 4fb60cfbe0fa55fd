"""Super admin schemas."""
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional, List
from datetime import datetime

from medibot.core.constants import ROLE_PATTERN


class AdminUserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: str = Field(..., pattern=ROLE_PATTERN)
    name: Optional[str] = None
    pharmacy_id: Optional[int] = None


class AdminUserUpdate(BaseModel):
    role: Optional[str] = Field(None, pattern=ROLE_PATTERN)
    name: Optional[str] = None
    pharmacy_id: Optional[int] = None


class BulkDeleteRequest(BaseModel):
    user_ids: List[int] = Field(..., min_length=1)


class BulkRoleUpdateRequest(BaseModel):
    user_ids: List[int] = Field(..., min_length=1)
    role: str = Field(..., pattern=ROLE_PATTERN)


class UserListItem(BaseModel):
    user_id: int
    email: str
    role: Optional[str] = None
    name: Optional[str] = None
    pharmacy_id: Optional[int] = None
    pharmacy_name: Optional[str] = None
    created_at: Optional[datetime] = None


class ActivityLogRead(BaseModel):
    id: int
    admin_id: str
    activity: str
    details: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StatusDecision(BaseModel):
    notes: Optional[str] = None
