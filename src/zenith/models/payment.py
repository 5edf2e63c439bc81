"""Payments (abonos) recorded against a debt."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from .debt import Debt


class Payment(SQLModel, table=True):
    """A single payment toward a debt."""

    __tablename__: ClassVar[str] = "payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    debt_id: int = Field(foreign_key="debt.id", nullable=False, index=True)
    paid_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    amount: float = Field(nullable=False)
    currency: str = Field(default="MXN", max_length=3)
    exchange_rate: float = Field(
        default=1.0, description="Units of the debt's currency per unit of this payment's currency"
    )
    # Balance left on the debt right after this payment; never recomputed.
    remaining_after: float = Field(default=0.0, nullable=False)
    note: str = Field(default="", max_length=255)

    debt: "Debt" = Relationship(
        back_populates="payments",
        sa_relationship=relationship("Debt", back_populates="payments"),
    )
