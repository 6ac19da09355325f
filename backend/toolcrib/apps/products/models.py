from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String

from toolcrib.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StockMovementTypeEnum(str, enum.Enum):
    IN = "entrada"
    OUT = "salida"


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        Index("ix_products_name", "name"),
        Index("ix_products_classification", "classification", "subclassification"),
        Index("ix_products_shelf_location", "shelf_location"),
    )

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    unit = Column(String(32), nullable=False)
    classification = Column(String(128), nullable=False)
    subclassification = Column(String(128), nullable=True)
    shelf_location = Column(String(32), nullable=True)
    # Touched on creation and on every stock adjustment.
    registered_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
