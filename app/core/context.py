# app/core/context.py

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from app.core.constants import ROLE_SCOPE
from app.models.user import StaffType, User, UserRole


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, passed explicitly into every workflow operation."""

    id: UUID
    name: str
    email: str
    role: UserRole
    division: Optional[str] = None
    staff_type: StaffType = StaffType.Office
    designation: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=UserRole(user.role),
            division=user.division,
            staff_type=StaffType(user.staff_type or StaffType.Office),
            designation=user.designation,
        )

    @property
    def scope(self) -> str:
        return ROLE_SCOPE[self.role]

    @property
    def is_system_wide(self) -> bool:
        return self.scope == "ALL"

    @property
    def is_division_scoped(self) -> bool:
        return self.scope == "DIVISION"

    @property
    def is_field_staff(self) -> bool:
        return self.staff_type == StaffType.Field

    def same_division(self, division: Optional[str]) -> bool:
        return bool(self.division) and self.division == division
