from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, Integer, String
from datetime import datetime
from typing import Optional


class Division(SQLModel, table=True):
    __tablename__ = "divisions"

    # Primary Key must be ONLY inside sa_column
    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    # case-insensitive uniqueness is enforced in division_service
    name: str = Field(
        sa_column=Column(String(128), nullable=False, unique=True)
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column("createdAt", DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column("updatedAt", DateTime(timezone=True), nullable=False)
    )
