from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String
from sqlalchemy.orm import relationship

from toolcrib.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Worker(Base):
    __tablename__ = "workers"
    __table_args__ = (
        Index("ix_workers_name", "name"),
        Index("ix_workers_is_active", "is_active"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Unique across active and inactive workers.
    code = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    registered_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    loans = relationship("Loan", back_populates="worker", lazy="select")
