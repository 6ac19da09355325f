from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, contains_eager, joinedload, selectinload

from toolcrib.apps.workers import models as worker_models
from toolcrib.apps.workers import schemas as worker_schemas
from toolcrib.errors import InvalidArgumentError, InvalidStateError, NotFoundError

from . import models, schemas

logger = logging.getLogger(__name__)

LOAN_DUE_DAYS = int(os.getenv("LOAN_DUE_DAYS", "7"))
OLDEST_OPEN_LOANS_LIMIT = 5

PARTIAL_RETURN_MESSAGE = "Devolución registrada correctamente"
CLOSED_MESSAGE = "Préstamo cerrado correctamente"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class LoanReturnOutcome:
    loan: models.Loan
    message: str
    closed: bool


def _date_window(
    start: Optional[date],
    end: Optional[date],
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Half-open [start 00:00, end + 1 day 00:00) so the end date is inclusive."""
    lower = datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None
    upper = (
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc) if end else None
    )
    return lower, upper


def _apply_window(query: Query, start: Optional[date], end: Optional[date]) -> Query:
    lower, upper = _date_window(start, end)
    if lower is not None:
        query = query.filter(models.Loan.delivered_at >= lower)
    if upper is not None:
        query = query.filter(models.Loan.delivered_at < upper)
    return query


def _loan_query(db: Session) -> Query:
    """Loans fully assembled with their worker and items."""
    return db.query(models.Loan).options(
        joinedload(models.Loan.worker),
        selectinload(models.Loan.items),
    )


def _active_worker_loan_query(db: Session) -> Query:
    return (
        db.query(models.Loan)
        .join(worker_models.Worker, models.Loan.worker_id == worker_models.Worker.id)
        .filter(worker_models.Worker.is_active.is_(True))
        .options(contains_eager(models.Loan.worker), selectinload(models.Loan.items))
    )


def get_loan(db: Session, loan_id: int) -> models.Loan:
    # Direct lookups ignore the worker's active flag.
    loan = _loan_query(db).filter(models.Loan.id == loan_id).first()
    if not loan:
        raise NotFoundError("Préstamo no encontrado")
    return loan


def list_loans(
    db: Session,
    *,
    status: Optional[models.LoanStatusEnum] = None,
    worker_id: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[models.Loan]:
    query = _active_worker_loan_query(db)
    if status is not None:
        query = query.filter(models.Loan.status == status)
    if worker_id is not None:
        query = query.filter(models.Loan.worker_id == worker_id)
    query = _apply_window(query, start, end)
    return query.order_by(models.Loan.delivered_at.desc(), models.Loan.id.desc()).all()


def list_worker_loans(
    db: Session,
    *,
    worker_id: int,
    status: Optional[models.LoanStatusEnum] = None,
) -> List[models.Loan]:
    worker = db.query(worker_models.Worker).filter(worker_models.Worker.id == worker_id).first()
    if not worker:
        raise NotFoundError("Trabajador no encontrado")
    query = _loan_query(db).filter(models.Loan.worker_id == worker_id)
    if status is not None:
        query = query.filter(models.Loan.status == status)
    return query.order_by(models.Loan.delivered_at.desc(), models.Loan.id.desc()).all()


def create_loan(
    db: Session,
    *,
    worker_id: int,
    items: Sequence[schemas.LoanItemCreate],
    notes: Optional[str] = None,
) -> models.Loan:
    """
    Hand a set of tools to an active worker.

    The loan and every line item are flushed in the caller's transaction;
    nothing is committed here, so a failure leaves no partial loan behind.
    """
    worker = (
        db.query(worker_models.Worker)
        .filter(worker_models.Worker.id == worker_id, worker_models.Worker.is_active.is_(True))
        .first()
    )
    if not worker:
        raise NotFoundError("Trabajador no encontrado o inactivo")
    if not items:
        raise InvalidArgumentError("Debe incluir al menos un ítem en el préstamo")
    for item in items:
        if item.quantity_lent < 1:
            raise InvalidArgumentError(
                f"La cantidad prestada debe ser un número entero positivo para el ítem {item.name}"
            )

    loan = models.Loan(
        worker_id=worker.id,
        delivered_at=_utcnow(),
        status=models.LoanStatusEnum.PENDING,
        notes=notes or "",
    )
    db.add(loan)
    db.flush()

    for item in items:
        db.add(
            models.LoanItem(
                loan_id=loan.id,
                name=item.name,
                quantity_lent=item.quantity_lent,
                quantity_returned=0,
                detail=item.detail or "",
            )
        )
    db.flush()
    db.expire(loan, ["items"])

    logger.info(
        "Loan created",
        extra={"loan_id": loan.id, "worker_id": worker.id, "items": len(items)},
    )
    return loan


def record_return(
    db: Session,
    *,
    loan_id: int,
    items: Sequence[schemas.LoanItemReturn],
    close_loan: bool = False,
) -> LoanReturnOutcome:
    """
    Reconcile returned quantities for a loan and optionally close it.

    Each entry sets the item's returned quantity to an absolute value.
    Every entry is validated before any item is touched; closing requires
    returned == lent on every item of the loan.
    """
    loan = get_loan(db, loan_id)

    if loan.status == models.LoanStatusEnum.COMPLETED:
        raise InvalidStateError("El préstamo ya está cerrado")
    if not items:
        raise InvalidArgumentError("Debe incluir al menos un ítem en la devolución")

    items_by_id: Dict[int, models.LoanItem] = {item.id: item for item in loan.items}
    updates: List[Tuple[models.LoanItem, int]] = []
    for entry in items:
        loan_item = items_by_id.get(entry.id)
        if loan_item is None:
            raise InvalidArgumentError(f"El ítem con ID {entry.id} no pertenece a este préstamo")
        if entry.quantity_returned < 0:
            raise InvalidArgumentError(
                f"La cantidad devuelta no puede ser negativa para el ítem {loan_item.name}"
            )
        if entry.quantity_returned > loan_item.quantity_lent:
            raise InvalidArgumentError(
                "La cantidad devuelta no puede ser mayor a la prestada "
                f"para el ítem {loan_item.name}"
            )
        updates.append((loan_item, entry.quantity_returned))

    for loan_item, quantity_returned in updates:
        loan_item.quantity_returned = quantity_returned
    db.flush()

    if close_loan:
        db.refresh(loan, ["items"])
        short_items = [item for item in loan.items if item.quantity_returned != item.quantity_lent]
        if short_items:
            raise InvalidArgumentError(
                "No se puede cerrar el préstamo porque hay ítems pendientes de devolver",
                extra={
                    "itemsPendientes": [
                        {"id": item.id, "nombre": item.name, "pendiente": item.quantity_pending}
                        for item in short_items
                    ]
                },
            )
        loan.status = models.LoanStatusEnum.COMPLETED
        loan.returned_at = _utcnow()
        db.flush()
        logger.info("Loan closed", extra={"loan_id": loan.id, "worker_id": loan.worker_id})
        return LoanReturnOutcome(loan=loan, message=CLOSED_MESSAGE, closed=True)

    if loan.status == models.LoanStatusEnum.PENDING and any(
        item.quantity_returned > 0 for item in loan.items
    ):
        loan.status = models.LoanStatusEnum.IN_PROGRESS
        db.flush()

    logger.info(
        "Loan return recorded",
        extra={"loan_id": loan.id, "items": len(updates), "status": loan.status.value},
    )
    return LoanReturnOutcome(loan=loan, message=PARTIAL_RETURN_MESSAGE, closed=False)


def delinquency_report(db: Session) -> List[schemas.DelinquentWorker]:
    """
    Group every under-returned item of open loans by worker.

    Only active workers are reported. Workers appear in the order the
    query first yields them (worker name, then oldest delivery first).
    """
    rows = (
        db.query(models.LoanItem, models.Loan, worker_models.Worker)
        .join(models.Loan, models.LoanItem.loan_id == models.Loan.id)
        .join(worker_models.Worker, models.Loan.worker_id == worker_models.Worker.id)
        .filter(
            models.Loan.status.in_(models.OPEN_LOAN_STATUSES),
            worker_models.Worker.is_active.is_(True),
            models.LoanItem.quantity_returned < models.LoanItem.quantity_lent,
        )
        .order_by(
            worker_models.Worker.name.asc(),
            models.Loan.delivered_at.asc(),
            models.LoanItem.id.asc(),
        )
        .all()
    )

    groups: Dict[int, schemas.DelinquentWorker] = {}
    for item, loan, worker in rows:
        pending_item = schemas.DelinquentItem(
            id=item.id,
            nombre=item.name,
            cantidadPrestada=item.quantity_lent,
            cantidadDevuelta=item.quantity_returned,
            pendiente=item.quantity_pending,
            comentarioDetalle=item.detail,
            fechaPrestamo=loan.delivered_at,
        )
        group = groups.get(worker.id)
        if group is None:
            group = schemas.DelinquentWorker(
                id=worker.id,
                trabajador=worker_schemas.WorkerSummary.model_validate(worker),
                itemsPendientes=[],
                totalPendiente=0,
                fechaPrestamoMasAntiguo=loan.delivered_at,
            )
            groups[worker.id] = group
        group.itemsPendientes.append(pending_item)
        group.totalPendiente += pending_item.pendiente
        if loan.delivered_at < group.fechaPrestamoMasAntiguo:
            group.fechaPrestamoMasAntiguo = loan.delivered_at
    return list(groups.values())


def loan_stats(
    db: Session,
    *,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> schemas.LoanStats:
    counts = _apply_window(
        db.query(models.Loan.status, func.count(models.Loan.id)), start, end
    ).group_by(models.Loan.status).all()

    open_query = _apply_window(
        db.query(models.Loan).filter(models.Loan.status.in_(models.OPEN_LOAN_STATUSES)),
        start,
        end,
    )
    open_total = open_query.count()
    oldest_open = (
        _apply_window(
            _loan_query(db).filter(models.Loan.status.in_(models.OPEN_LOAN_STATUSES)),
            start,
            end,
        )
        .order_by(models.Loan.delivered_at.asc(), models.Loan.id.asc())
        .limit(OLDEST_OPEN_LOANS_LIMIT)
        .all()
    )

    lent, returned = _apply_window(
        db.query(
            func.coalesce(func.sum(models.LoanItem.quantity_lent), 0),
            func.coalesce(func.sum(models.LoanItem.quantity_returned), 0),
        ).join(models.Loan, models.LoanItem.loan_id == models.Loan.id),
        start,
        end,
    ).one()

    return schemas.LoanStats(
        conteoPorEstado=[schemas.StatusCount(estado=status, total=total) for status, total in counts],
        prestamosAbiertos=schemas.OpenLoansSummary(
            total=open_total,
            detalles=[schemas.LoanRead.model_validate(loan) for loan in oldest_open],
        ),
        totalItems=schemas.ItemTotals(
            prestados=int(lent),
            devueltos=int(returned),
            pendientes=int(lent) - int(returned),
        ),
        rangoFechas=schemas.DateRange(fechaInicio=start, fechaFin=end),
    )


def mark_overdue_loans(
    db: Session,
    *,
    now: Optional[datetime] = None,
    due_days: Optional[int] = None,
) -> List[int]:
    """Move pending/in-progress loans older than the due window to overdue."""
    days = LOAN_DUE_DAYS if due_days is None else due_days
    cutoff = (now or _utcnow()) - timedelta(days=days)
    loans = (
        db.query(models.Loan)
        .filter(
            models.Loan.status.in_(
                [models.LoanStatusEnum.PENDING, models.LoanStatusEnum.IN_PROGRESS]
            ),
            models.Loan.delivered_at < cutoff,
        )
        .order_by(models.Loan.id.asc())
        .all()
    )
    for loan in loans:
        loan.status = models.LoanStatusEnum.OVERDUE
    db.flush()
    marked = [loan.id for loan in loans]
    if marked:
        logger.info("Loans marked overdue", extra={"count": len(marked), "due_days": days})
    return marked
