"""Income records (ingresos)."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from .user import User


class Income(SQLModel, table=True):
    """Money received by the user; unrelated to debt balances."""

    __tablename__: ClassVar[str] = "income"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    description: str = Field(nullable=False, max_length=120)
    amount: float = Field(nullable=False)
    currency: str = Field(default="MXN", max_length=3)
    received_on: date = Field(default_factory=date.today, nullable=False, index=True)
    category: str = Field(default="Salary", max_length=32, index=True)

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="incomes"))
