from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from . import models


class ProductCreate(BaseModel):
    code: str = Field(..., alias="codigo", min_length=1)
    name: str = Field(..., alias="nombre", min_length=1)
    quantity: int = Field(0, alias="cantidad", strict=True, ge=0)
    unit: str = Field(..., alias="unidadMedida", min_length=1)
    classification: str = Field(..., alias="clasificacion", min_length=1)
    subclassification: Optional[str] = Field(None, alias="subclasificacion")
    shelf_location: Optional[str] = Field(None, alias="ubicacionEstante")

    class Config:
        populate_by_name = True


class ProductUpdate(BaseModel):
    code: Optional[str] = Field(None, alias="codigo", min_length=1)
    name: Optional[str] = Field(None, alias="nombre", min_length=1)
    quantity: Optional[int] = Field(None, alias="cantidad", strict=True, ge=0)
    unit: Optional[str] = Field(None, alias="unidadMedida", min_length=1)
    classification: Optional[str] = Field(None, alias="clasificacion", min_length=1)
    subclassification: Optional[str] = Field(None, alias="subclasificacion")
    shelf_location: Optional[str] = Field(None, alias="ubicacionEstante")

    class Config:
        populate_by_name = True


class ProductRead(BaseModel):
    id: int
    codigo: str = Field(validation_alias="code")
    nombre: str = Field(validation_alias="name")
    cantidad: int = Field(validation_alias="quantity")
    unidad_medida: str = Field(validation_alias="unit")
    clasificacion: str = Field(validation_alias="classification")
    subclasificacion: Optional[str] = Field(None, validation_alias="subclassification")
    ubicacion_estante: Optional[str] = Field(None, validation_alias="shelf_location")
    fecha_registro: datetime = Field(validation_alias="registered_at")

    class Config:
        from_attributes = True
        populate_by_name = True


class StockAdjustRequest(BaseModel):
    kind: models.StockMovementTypeEnum = Field(..., alias="tipo")
    quantity: int = Field(..., alias="cantidad", strict=True, gt=0)
    reason: Optional[str] = Field(None, alias="motivo")

    class Config:
        populate_by_name = True


class StockAdjustResult(BaseModel):
    mensaje: str
    producto: ProductRead


class ProductMessage(BaseModel):
    mensaje: str


class ClassificationCount(BaseModel):
    clasificacion: str
    cantidad: int


class LowStockSummary(BaseModel):
    cantidad: int
    productos: List[ProductRead]


class InventoryStats(BaseModel):
    totalProductos: int
    totalStock: int
    productosPorClasificacion: List[ClassificationCount]
    stockBajo: LowStockSummary
