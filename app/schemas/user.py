from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr

from app.models.user import StaffType, UserRole
from app.schemas.base import CamelModel


# ---------------------------------------------------------
# BASE
# ---------------------------------------------------------
class UserBase(CamelModel):
    name: str
    email: EmailStr


# ---------------------------------------------------------
# CREATE USER (Admin creates any user)
# ---------------------------------------------------------
class UserCreate(UserBase):
    role: UserRole = UserRole.Staff
    staff_type: StaffType = StaffType.Office
    division: Optional[str] = None   # required for Divisional Head / Division CC / Staff
    designation: Optional[str] = None
    mobile: Optional[str] = None
    password: Optional[str] = None   # only for locally managed accounts


# ---------------------------------------------------------
# UPDATE USER (Admin edits)
# ---------------------------------------------------------
class UserUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    staff_type: Optional[StaffType] = None
    division: Optional[str] = None
    designation: Optional[str] = None
    mobile: Optional[str] = None
    password: Optional[str] = None


# ---------------------------------------------------------
# PROFILE (self-service; role/division/staffType rejected)
# ---------------------------------------------------------
class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    designation: Optional[str] = None
    mobile: Optional[str] = None
    role: Optional[UserRole] = None
    division: Optional[str] = None
    staff_type: Optional[StaffType] = None


# ---------------------------------------------------------
# READ USER (response)
# ---------------------------------------------------------
class UserRead(UserBase):
    id: UUID
    role: UserRole
    staff_type: StaffType
    division: Optional[str] = None
    designation: Optional[str] = None
    mobile: Optional[str] = None
    created_at: Optional[datetime] = None


class UserSummary(CamelModel):
    """Officer pick-lists and other places where the full record is not needed."""

    id: UUID
    name: str
    role: UserRole
    division: Optional[str] = None
    designation: Optional[str] = None
