from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from toolcrib.apps.loans import models as loan_models
from toolcrib.errors import InvalidArgumentError, NotFoundError

from . import models, schemas

logger = logging.getLogger(__name__)

TOP_BORROWERS_LIMIT = 5

DUPLICATE_CODE_MESSAGE = "Ya existe un trabajador con este código"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _code_taken(db: Session, code: str, *, exclude_id: Optional[int] = None) -> bool:
    query = db.query(models.Worker.id).filter(models.Worker.code == code)
    if exclude_id is not None:
        query = query.filter(models.Worker.id != exclude_id)
    return query.first() is not None


def _count_open_loans(db: Session, worker_id: int) -> int:
    return (
        db.query(func.count(loan_models.Loan.id))
        .filter(
            loan_models.Loan.worker_id == worker_id,
            loan_models.Loan.status.in_(loan_models.OPEN_LOAN_STATUSES),
        )
        .scalar()
        or 0
    )


def _ensure_can_deactivate(db: Session, worker: models.Worker) -> None:
    open_loans = _count_open_loans(db, worker.id)
    if open_loans > 0:
        logger.info(
            "Worker deactivation refused",
            extra={"worker_id": worker.id, "open_loans": open_loans},
        )
        raise InvalidArgumentError(
            "No se puede desactivar el trabajador porque tiene préstamos activos",
            extra={"prestamosActivos": open_loans},
        )


def get_worker(db: Session, worker_id: int) -> models.Worker:
    worker = db.query(models.Worker).filter(models.Worker.id == worker_id).first()
    if not worker:
        raise NotFoundError("Trabajador no encontrado")
    return worker


def list_workers(
    db: Session,
    *,
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> List[models.Worker]:
    query = db.query(models.Worker)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(models.Worker.code.ilike(pattern), models.Worker.name.ilike(pattern))
        )
    if is_active is not None:
        query = query.filter(models.Worker.is_active.is_(is_active))
    return query.order_by(models.Worker.name.asc()).all()


def create_worker(db: Session, *, payload: schemas.WorkerCreate) -> models.Worker:
    if _code_taken(db, payload.code):
        raise InvalidArgumentError(DUPLICATE_CODE_MESSAGE)
    worker = models.Worker(
        code=payload.code,
        name=payload.name,
        is_active=True,
        registered_at=_utcnow(),
    )
    db.add(worker)
    db.flush()
    logger.info("Worker created", extra={"worker_id": worker.id, "code": worker.code})
    return worker


def update_worker(
    db: Session,
    *,
    worker_id: int,
    payload: schemas.WorkerUpdate,
) -> models.Worker:
    worker = get_worker(db, worker_id)
    if payload.code and payload.code != worker.code:
        if _code_taken(db, payload.code, exclude_id=worker.id):
            raise InvalidArgumentError(DUPLICATE_CODE_MESSAGE)
        worker.code = payload.code
    if payload.name:
        worker.name = payload.name
    if payload.is_active is not None and payload.is_active != worker.is_active:
        if not payload.is_active:
            _ensure_can_deactivate(db, worker)
        worker.is_active = payload.is_active
    db.flush()
    return worker


def deactivate_worker(db: Session, *, worker_id: int) -> models.Worker:
    """
    Soft-delete a worker.

    Refused while any of the worker's loans is still open; the row is
    never removed so historical loans keep their owner.
    """
    worker = get_worker(db, worker_id)
    _ensure_can_deactivate(db, worker)
    worker.is_active = False
    db.flush()
    logger.info("Worker deactivated", extra={"worker_id": worker.id})
    return worker


def worker_stats(db: Session) -> schemas.WorkerStats:
    total = db.query(func.count(models.Worker.id)).scalar() or 0
    active = (
        db.query(func.count(models.Worker.id))
        .filter(models.Worker.is_active.is_(True))
        .scalar()
        or 0
    )

    loan_count = func.count(loan_models.Loan.id)
    top_rows = (
        db.query(models.Worker.id, models.Worker.code, models.Worker.name, loan_count)
        .join(loan_models.Loan, loan_models.Loan.worker_id == models.Worker.id)
        .group_by(models.Worker.id, models.Worker.code, models.Worker.name)
        .order_by(loan_count.desc(), models.Worker.name.asc())
        .limit(TOP_BORROWERS_LIMIT)
        .all()
    )
    return schemas.WorkerStats(
        totalTrabajadores=total,
        trabajadoresActivos=active,
        trabajadoresInactivos=total - active,
        trabajadoresTopPrestamos=[
            schemas.TopBorrower(id=row[0], codigo=row[1], nombre=row[2], totalPrestamos=row[3])
            for row in top_rows
        ],
    )
