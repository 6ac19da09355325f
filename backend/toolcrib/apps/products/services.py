from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from toolcrib.errors import InvalidArgumentError, NotFoundError

from . import models, schemas

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 5
LOW_STOCK_LIMIT = 10

DUPLICATE_CODE_MESSAGE = "Ya existe un producto con este código"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StockAdjustment:
    product: models.Product
    message: str


def _code_taken(db: Session, code: str, *, exclude_id: Optional[int] = None) -> bool:
    query = db.query(models.Product.id).filter(models.Product.code == code)
    if exclude_id is not None:
        query = query.filter(models.Product.id != exclude_id)
    return query.first() is not None


def get_product(db: Session, product_id: int) -> models.Product:
    product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        raise NotFoundError("Producto no encontrado")
    return product


def list_products(
    db: Session,
    *,
    search: Optional[str] = None,
    classification: Optional[str] = None,
    subclassification: Optional[str] = None,
    shelf: Optional[str] = None,
) -> List[models.Product]:
    query = db.query(models.Product)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(models.Product.code.ilike(pattern), models.Product.name.ilike(pattern))
        )
    if classification:
        query = query.filter(models.Product.classification == classification)
    if subclassification:
        query = query.filter(models.Product.subclassification == subclassification)
    if shelf:
        query = query.filter(models.Product.shelf_location == shelf)
    return query.order_by(models.Product.name.asc()).all()


def list_products_on_shelf(db: Session, shelf: str) -> List[models.Product]:
    products = (
        db.query(models.Product)
        .filter(models.Product.shelf_location == shelf)
        .order_by(models.Product.name.asc())
        .all()
    )
    if not products:
        raise NotFoundError(f"No se encontraron productos en el estante {shelf}")
    return products


def create_product(db: Session, *, payload: schemas.ProductCreate) -> models.Product:
    if _code_taken(db, payload.code):
        raise InvalidArgumentError(DUPLICATE_CODE_MESSAGE)
    product = models.Product(
        code=payload.code,
        name=payload.name,
        quantity=payload.quantity,
        unit=payload.unit,
        classification=payload.classification,
        subclassification=payload.subclassification,
        shelf_location=payload.shelf_location,
        registered_at=_utcnow(),
    )
    db.add(product)
    db.flush()
    logger.info("Product created", extra={"product_id": product.id, "code": product.code})
    return product


def update_product(
    db: Session,
    *,
    product_id: int,
    payload: schemas.ProductUpdate,
) -> models.Product:
    product = get_product(db, product_id)
    changes = payload.model_dump(exclude_unset=True)
    new_code = changes.get("code")
    if new_code and new_code != product.code and _code_taken(db, new_code, exclude_id=product.id):
        raise InvalidArgumentError(DUPLICATE_CODE_MESSAGE)
    for field, value in changes.items():
        if value is None and field not in {"subclassification", "shelf_location"}:
            continue
        setattr(product, field, value)
    db.flush()
    logger.info("Product updated", extra={"product_id": product.id, "fields": sorted(changes)})
    return product


def delete_product(db: Session, *, product_id: int) -> None:
    product = get_product(db, product_id)
    db.delete(product)
    db.flush()
    logger.info("Product deleted", extra={"product_id": product_id})


def adjust_stock(
    db: Session,
    *,
    product_id: int,
    kind: Union[models.StockMovementTypeEnum, str],
    quantity: int,
    reason: Optional[str] = None,
) -> StockAdjustment:
    """
    Apply an "entrada" (in) or "salida" (out) movement to a product.

    The quantity never goes negative: an out movement larger than the
    current stock is rejected and nothing is written. Movements are not
    kept in a history table.
    """
    try:
        kind = models.StockMovementTypeEnum(kind)
    except ValueError:
        raise InvalidArgumentError(
            'Tipo de operación no válido. Use "entrada" o "salida"'
        ) from None
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidArgumentError("La cantidad debe ser un número positivo")

    product = get_product(db, product_id)

    if kind == models.StockMovementTypeEnum.OUT and product.quantity < quantity:
        logger.info(
            "Stock out rejected",
            extra={"product_id": product.id, "available": product.quantity, "requested": quantity},
        )
        raise InvalidArgumentError(
            "Stock insuficiente",
            extra={"stockDisponible": product.quantity, "cantidadSolicitada": quantity},
        )

    if kind == models.StockMovementTypeEnum.IN:
        product.quantity = product.quantity + quantity
    else:
        product.quantity = product.quantity - quantity
    product.registered_at = _utcnow()
    db.flush()

    logger.info(
        "Stock adjusted",
        extra={
            "product_id": product.id,
            "kind": kind.value,
            "quantity": quantity,
            "new_quantity": product.quantity,
            "reason": reason,
        },
    )
    return StockAdjustment(
        product=product,
        message=f"Stock actualizado correctamente ({kind.value} de {quantity} {product.unit})",
    )


def inventory_stats(db: Session) -> schemas.InventoryStats:
    total_products = db.query(func.count(models.Product.id)).scalar() or 0
    total_stock = db.query(func.coalesce(func.sum(models.Product.quantity), 0)).scalar() or 0

    count_col = func.count(models.Product.id)
    by_classification = (
        db.query(models.Product.classification, count_col)
        .group_by(models.Product.classification)
        .order_by(count_col.desc(), models.Product.classification.asc())
        .all()
    )
    low_stock = (
        db.query(models.Product)
        .filter(models.Product.quantity < LOW_STOCK_THRESHOLD)
        .order_by(models.Product.quantity.asc(), models.Product.name.asc())
        .limit(LOW_STOCK_LIMIT)
        .all()
    )
    return schemas.InventoryStats(
        totalProductos=total_products,
        totalStock=total_stock,
        productosPorClasificacion=[
            schemas.ClassificationCount(clasificacion=classification, cantidad=count)
            for classification, count in by_classification
        ],
        stockBajo=schemas.LowStockSummary(
            cantidad=len(low_stock),
            productos=[schemas.ProductRead.model_validate(p) for p in low_stock],
        ),
    )
