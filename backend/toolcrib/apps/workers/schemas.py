from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class WorkerCreate(BaseModel):
    code: str = Field(..., alias="codigo", min_length=1)
    name: str = Field(..., alias="nombre", min_length=1)

    class Config:
        populate_by_name = True


class WorkerUpdate(BaseModel):
    code: Optional[str] = Field(None, alias="codigo", min_length=1)
    name: Optional[str] = Field(None, alias="nombre", min_length=1)
    is_active: Optional[bool] = Field(None, alias="activo")

    class Config:
        populate_by_name = True


class WorkerSummary(BaseModel):
    """Compact worker reference embedded in loans and reports."""

    id: int
    codigo: str = Field(validation_alias="code")
    nombre: str = Field(validation_alias="name")

    class Config:
        from_attributes = True
        populate_by_name = True


class WorkerRead(WorkerSummary):
    activo: bool = Field(validation_alias="is_active")
    fecha_registro: datetime = Field(validation_alias="registered_at")


class WorkerMessage(BaseModel):
    mensaje: str


class TopBorrower(BaseModel):
    id: int
    codigo: str
    nombre: str
    totalPrestamos: int


class WorkerStats(BaseModel):
    totalTrabajadores: int
    trabajadoresActivos: int
    trabajadoresInactivos: int
    trabajadoresTopPrestamos: List[TopBorrower]
