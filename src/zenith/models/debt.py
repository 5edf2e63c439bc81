"""Debt entity and its lifecycle states."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from .payment import Payment
    from .user import User


class DebtState(str, Enum):
    """Lifecycle of a debt.

    ``OVERDUE`` is only ever derived for display; it is never written by this
    client.
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    PAID = "paid"
    OVERDUE = "overdue"


class Debt(SQLModel, table=True):
    """A debt or loan owed to a creditor."""

    __tablename__: ClassVar[str] = "debt"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    description: str = Field(nullable=False, max_length=120)
    creditor: str = Field(default="", max_length=120)
    principal: float = Field(nullable=False)
    currency: str = Field(default="MXN", max_length=3, description="Currency code, e.g. MXN or BS")
    registered_on: date = Field(default_factory=date.today, nullable=False)
    due_date: date = Field(nullable=False, index=True)
    state: str = Field(default=DebtState.PENDING.value, max_length=16, index=True)
    reminder: bool = Field(default=True)
    interest_applied: bool = Field(default=False)
    interest_rate: float = Field(default=0.0, description="Percent applied once to the principal")

    payments: list["Payment"] = Relationship(
        back_populates="debt",
        sa_relationship=relationship(
            "Payment", back_populates="debt", cascade="all, delete-orphan"
        ),
    )
    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="debts"))
