from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from findules.models import RecordStatus, Role


class UserBase(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    role: Role = Role.STAFF
    branch_id: int


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    branch_id: Optional[int] = None
    status: Optional[RecordStatus] = None
    password: Optional[str] = Field(None, min_length=6)


class UserRead(UserBase):
    id: int
    email: str
    status: RecordStatus
    branch_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
