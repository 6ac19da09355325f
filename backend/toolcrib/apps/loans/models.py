from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from toolcrib.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LoanStatusEnum(str, enum.Enum):
    PENDING = "pendiente"
    IN_PROGRESS = "en_progreso"
    COMPLETED = "completado"
    OVERDUE = "atrasado"


# Non-terminal states: the loan still has tools out.
OPEN_LOAN_STATUSES = (
    LoanStatusEnum.PENDING,
    LoanStatusEnum.IN_PROGRESS,
    LoanStatusEnum.OVERDUE,
)


class Loan(Base):
    __tablename__ = "loans"
    __table_args__ = (
        Index("ix_loans_worker", "worker_id"),
        Index("ix_loans_status", "status"),
        Index("ix_loans_delivered_at", "delivered_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    worker_id = Column(Integer, ForeignKey("workers.id", ondelete="RESTRICT"), nullable=False)
    delivered_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    returned_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(
        SAEnum(
            LoanStatusEnum,
            name="loan_status_enum",
            native_enum=False,
            length=16,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=LoanStatusEnum.PENDING,
    )
    notes = Column(Text, nullable=False, default="")

    worker = relationship("Worker", back_populates="loans", lazy="joined")
    items = relationship(
        "LoanItem",
        back_populates="loan",
        lazy="selectin",
        order_by="LoanItem.id",
    )


class LoanItem(Base):
    __tablename__ = "loan_items"
    __table_args__ = (
        CheckConstraint("quantity_lent >= 1", name="ck_loan_items_quantity_lent_positive"),
        CheckConstraint(
            "quantity_returned >= 0 AND quantity_returned <= quantity_lent",
            name="ck_loan_items_quantity_returned_range",
        ),
        Index("ix_loan_items_loan", "loan_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    loan_id = Column(Integer, ForeignKey("loans.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    quantity_lent = Column(Integer, nullable=False)
    quantity_returned = Column(Integer, nullable=False, default=0)
    detail = Column(Text, nullable=False, default="")

    loan = relationship("Loan", back_populates="items")

    @property
    def quantity_pending(self) -> int:
        return self.quantity_lent - self.quantity_returned
