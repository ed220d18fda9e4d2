from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.base import CamelModel


class DivisionCreate(CamelModel):
    name: str = Field(max_length=128)


class DivisionRename(CamelModel):
    name: str = Field(max_length=128)


class DivisionRead(CamelModel):
    id: int
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DivisionRenameResult(CamelModel):
    division: DivisionRead
    users_updated: int
