from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from biblio.models import MemberStatus

class Member(BaseModel):
    id: int
    name: str
    email: EmailStr
    phone: str
    address: str
    status: MemberStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class MemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=32)
    address: str = Field(..., min_length=1)
    status: MemberStatus = MemberStatus.ACTIVE

class MemberUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1, max_length=32)
    address: Optional[str] = Field(None, min_length=1)
    status: Optional[MemberStatus] = None
