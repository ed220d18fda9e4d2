# app/models/user.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, String, Uuid
from sqlalchemy import Enum as PGEnum
from datetime import datetime
import uuid
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    Admin = "Admin"
    HOD = "HOD"
    DivisionalHead = "Divisional Head"
    DivisionCC = "Division CC"
    Staff = "Staff"


class StaffType(str, Enum):
    Office = "Office"
    Field = "Field"


# Roles that only make sense inside a division
DIVISION_BOUND_ROLES = {UserRole.DivisionalHead, UserRole.DivisionCC, UserRole.Staff}


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True)
    )

    name: str = Field(nullable=False)
    email: str = Field(nullable=False, index=True, unique=True)

    # stored by value ("Division CC"), matching existing documents
    role: UserRole = Field(
        default=UserRole.Staff,
        sa_column=Column(
            PGEnum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
            nullable=False,
        )
    )

    staff_type: StaffType = Field(
        default=StaffType.Office,
        sa_column=Column(
            "staffType",
            PGEnum(StaffType, name="staff_type", values_callable=lambda e: [m.value for m in e]),
            nullable=False,
        )
    )

    # division is referenced by name, renames cascade (see division_service)
    division: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True, index=True)
    )

    designation: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))
    mobile: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))

    # only set for accounts that log in with a local password
    password_hash: Optional[str] = Field(
        default=None,
        sa_column=Column("passwordHash", String, nullable=True)
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column("createdAt", DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column("updatedAt", DateTime(timezone=True), nullable=False)
    )
