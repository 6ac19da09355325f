from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from toolcrib.apps.loans import models as loan_models
from toolcrib.apps.loans import schemas as loan_schemas
from toolcrib.apps.loans import services as loan_services
from toolcrib.database import get_read_db, get_write_db, transaction

from . import schemas, services

router = APIRouter(
    prefix="/workers",
    tags=["workers"],
)


@router.get("", response_model=List[schemas.WorkerRead])
def list_workers(
    busqueda: Optional[str] = None,
    activo: Optional[bool] = None,
    db: Session = Depends(get_read_db),
):
    return services.list_workers(db, search=busqueda, is_active=activo)


@router.get("/stats", response_model=schemas.WorkerStats)
def worker_stats(db: Session = Depends(get_read_db)):
    return services.worker_stats(db)


@router.get("/{worker_id}", response_model=schemas.WorkerRead)
def get_worker(worker_id: int, db: Session = Depends(get_read_db)):
    return services.get_worker(db, worker_id)


@router.get("/{worker_id}/loans", response_model=List[loan_schemas.LoanRead])
def list_worker_loans(
    worker_id: int,
    estado: Optional[loan_models.LoanStatusEnum] = None,
    db: Session = Depends(get_read_db),
):
    return loan_services.list_worker_loans(db, worker_id=worker_id, status=estado)


@router.post(
    "",
    response_model=schemas.WorkerRead,
    status_code=status.HTTP_201_CREATED,
)
def create_worker(
    payload: schemas.WorkerCreate,
    db: Session = Depends(get_write_db),
):
    with transaction(db):
        worker = services.create_worker(db, payload=payload)
    db.refresh(worker)
    return worker


@router.put("/{worker_id}", response_model=schemas.WorkerRead)
def update_worker(
    worker_id: int,
    payload: schemas.WorkerUpdate,
    db: Session = Depends(get_write_db),
):
    with transaction(db):
        worker = services.update_worker(db, worker_id=worker_id, payload=payload)
    db.refresh(worker)
    return worker


@router.delete("/{worker_id}", response_model=schemas.WorkerMessage)
def deactivate_worker(worker_id: int, db: Session = Depends(get_write_db)):
    with transaction(db):
        services.deactivate_worker(db, worker_id=worker_id)
    return {"mensaje": "Trabajador desactivado correctamente"}
