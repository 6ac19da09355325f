from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from toolcrib.database import get_read_db, get_write_db, transaction

from . import schemas, services

router = APIRouter(
    prefix="/products",
    tags=["products"],
)


@router.get("", response_model=List[schemas.ProductRead])
def list_products(
    busqueda: Optional[str] = None,
    clasificacion: Optional[str] = None,
    subclasificacion: Optional[str] = None,
    estante: Optional[str] = None,
    db: Session = Depends(get_read_db),
):
    return services.list_products(
        db,
        search=busqueda,
        classification=clasificacion,
        subclassification=subclasificacion,
        shelf=estante,
    )


@router.get("/stats", response_model=schemas.InventoryStats)
def inventory_stats(db: Session = Depends(get_read_db)):
    return services.inventory_stats(db)


@router.get("/shelf/{estante}", response_model=List[schemas.ProductRead])
def list_products_on_shelf(estante: str, db: Session = Depends(get_read_db)):
    return services.list_products_on_shelf(db, estante)


@router.get("/{product_id}", response_model=schemas.ProductRead)
def get_product(product_id: int, db: Session = Depends(get_read_db)):
    return services.get_product(db, product_id)


@router.post(
    "",
    response_model=schemas.ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: schemas.ProductCreate,
    db: Session = Depends(get_write_db),
):
    with transaction(db):
        product = services.create_product(db, payload=payload)
    db.refresh(product)
    return product


@router.put("/{product_id}", response_model=schemas.ProductRead)
def update_product(
    product_id: int,
    payload: schemas.ProductUpdate,
    db: Session = Depends(get_write_db),
):
    with transaction(db):
        product = services.update_product(db, product_id=product_id, payload=payload)
    db.refresh(product)
    return product


@router.delete("/{product_id}", response_model=schemas.ProductMessage)
def delete_product(product_id: int, db: Session = Depends(get_write_db)):
    with transaction(db):
        services.delete_product(db, product_id=product_id)
    return {"mensaje": "Producto eliminado correctamente"}


@router.post("/{product_id}/stock", response_model=schemas.StockAdjustResult)
def adjust_stock(
    product_id: int,
    payload: schemas.StockAdjustRequest,
    db: Session = Depends(get_write_db),
):
    with transaction(db):
        adjustment = services.adjust_stock(
            db,
            product_id=product_id,
            kind=payload.kind,
            quantity=payload.quantity,
            reason=payload.reason,
        )
    db.refresh(adjustment.product)
    return schemas.StockAdjustResult(
        mensaje=adjustment.message,
        producto=schemas.ProductRead.model_validate(adjustment.product),
    )
