from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from toolcrib.apps.workers.schemas import WorkerSummary

from . import models


class LoanItemCreate(BaseModel):
    name: str = Field(..., alias="nombre", min_length=1)
    quantity_lent: int = Field(..., alias="cantidadPrestada", strict=True, ge=1)
    detail: str = Field(..., alias="comentarioDetalle", min_length=1)

    class Config:
        populate_by_name = True


class LoanCreate(BaseModel):
    worker_id: int = Field(..., alias="trabajadorId", strict=True, ge=1)
    items: List[LoanItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, alias="observaciones")

    class Config:
        populate_by_name = True


class LoanItemReturn(BaseModel):
    id: int = Field(..., strict=True, ge=1)
    quantity_returned: int = Field(..., alias="cantidadDevuelta", strict=True, ge=0)

    class Config:
        populate_by_name = True


class LoanReturnRequest(BaseModel):
    items: List[LoanItemReturn] = Field(..., min_length=1)
    close_loan: bool = Field(False, alias="cerrarPrestamo")

    class Config:
        populate_by_name = True


class LoanItemRead(BaseModel):
    id: int
    nombre: str = Field(validation_alias="name")
    cantidad_prestada: int = Field(validation_alias="quantity_lent")
    cantidad_devuelta: int = Field(validation_alias="quantity_returned")
    comentario_detalle: str = Field(validation_alias="detail")

    class Config:
        from_attributes = True
        populate_by_name = True


class LoanRead(BaseModel):
    id: int
    trabajador_id: int = Field(validation_alias="worker_id")
    fecha_entrega: datetime = Field(validation_alias="delivered_at")
    fecha_devolucion_final: Optional[datetime] = Field(None, validation_alias="returned_at")
    estado: models.LoanStatusEnum = Field(validation_alias="status")
    observaciones: str = Field("", validation_alias="notes")
    trabajador: WorkerSummary = Field(validation_alias="worker")
    items: List[LoanItemRead] = Field(default_factory=list)

    class Config:
        from_attributes = True
        populate_by_name = True


class LoanReturnResult(BaseModel):
    mensaje: str
    prestamo: LoanRead


class OverdueSweepResult(BaseModel):
    mensaje: str
    actualizados: int
    prestamos: List[int]


class DelinquentItem(BaseModel):
    id: int
    nombre: str
    cantidadPrestada: int
    cantidadDevuelta: int
    pendiente: int
    comentarioDetalle: str
    fechaPrestamo: datetime


class DelinquentWorker(BaseModel):
    id: int
    trabajador: WorkerSummary
    itemsPendientes: List[DelinquentItem]
    totalPendiente: int
    fechaPrestamoMasAntiguo: datetime


class StatusCount(BaseModel):
    estado: models.LoanStatusEnum
    total: int


class OpenLoansSummary(BaseModel):
    total: int
    detalles: List[LoanRead]


class ItemTotals(BaseModel):
    prestados: int
    devueltos: int
    pendientes: int


class DateRange(BaseModel):
    fechaInicio: Optional[date] = None
    fechaFin: Optional[date] = None


class LoanStats(BaseModel):
    conteoPorEstado: List[StatusCount]
    prestamosAbiertos: OpenLoansSummary
    totalItems: ItemTotals
    rangoFechas: DateRange
