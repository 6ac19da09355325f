from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from toolcrib.database import get_read_db, get_write_db, transaction

from . import models, schemas, services

router = APIRouter(
    prefix="/loans",
    tags=["loans"],
)


@router.post(
    "",
    response_model=schemas.LoanRead,
    status_code=status.HTTP_201_CREATED,
)
def create_loan(
    payload: schemas.LoanCreate,
    db: Session = Depends(get_write_db),
):
    with transaction(db):
        loan = services.create_loan(
            db,
            worker_id=payload.worker_id,
            items=payload.items,
            notes=payload.notes,
        )
        loan_id = loan.id
    return services.get_loan(db, loan_id)


@router.get("", response_model=List[schemas.LoanRead])
def list_loans(
    estado: Optional[models.LoanStatusEnum] = None,
    trabajador_id: Optional[int] = Query(None, alias="trabajadorId", ge=1),
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    db: Session = Depends(get_read_db),
):
    return services.list_loans(
        db,
        status=estado,
        worker_id=trabajador_id,
        start=fecha_inicio,
        end=fecha_fin,
    )


@router.get("/reports/delinquent", response_model=List[schemas.DelinquentWorker])
def delinquency_report(db: Session = Depends(get_read_db)):
    return services.delinquency_report(db)


@router.get("/stats", response_model=schemas.LoanStats)
def loan_stats(
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    db: Session = Depends(get_read_db),
):
    return services.loan_stats(db, start=fecha_inicio, end=fecha_fin)


@router.post("/overdue/sweep", response_model=schemas.OverdueSweepResult)
def sweep_overdue_loans(db: Session = Depends(get_write_db)):
    with transaction(db):
        marked = services.mark_overdue_loans(db)
    return schemas.OverdueSweepResult(
        mensaje=f"{len(marked)} préstamo(s) marcados como atrasados",
        actualizados=len(marked),
        prestamos=marked,
    )


@router.get("/{loan_id}", response_model=schemas.LoanRead)
def get_loan(loan_id: int, db: Session = Depends(get_read_db)):
    return services.get_loan(db, loan_id)


@router.put("/{loan_id}/return", response_model=schemas.LoanReturnResult)
def record_return(
    loan_id: int,
    payload: schemas.LoanReturnRequest,
    db: Session = Depends(get_write_db),
):
    with transaction(db):
        outcome = services.record_return(
            db,
            loan_id=loan_id,
            items=payload.items,
            close_loan=payload.close_loan,
        )
    loan = services.get_loan(db, loan_id)
    return schemas.LoanReturnResult(
        mensaje=outcome.message,
        prestamo=schemas.LoanRead.model_validate(loan),
    )
