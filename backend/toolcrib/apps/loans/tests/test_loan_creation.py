from __future__ import annotations

import pytest

from toolcrib.apps.loans import models as loan_models
from toolcrib.apps.loans import schemas as loan_schemas
from toolcrib.apps.loans import services as loan_services
from toolcrib.apps.workers import models as worker_models
from toolcrib.database import transaction
from toolcrib.errors import InvalidArgumentError, NotFoundError


def _create_worker(db, code="T-001", name="Ana Pérez", active=True):
    worker = worker_models.Worker(code=code, name=name, is_active=active)
    db.add(worker)
    db.commit()
    db.refresh(worker)
    return worker


def _items(*specs):
    return [
        loan_schemas.LoanItemCreate(nombre=name, cantidadPrestada=qty, comentarioDetalle=detail)
        for name, qty, detail in specs
    ]


def test_create_loan_starts_pending_with_nothing_returned(db_session):
    worker = _create_worker(db_session)

    with transaction(db_session):
        loan = loan_services.create_loan(
            db_session,
            worker_id=worker.id,
            items=_items(("Llave", 3, "30mm")),
        )

    loan = loan_services.get_loan(db_session, loan.id)
    assert loan.status == loan_models.LoanStatusEnum.PENDING
    assert loan.delivered_at is not None
    assert loan.returned_at is None
    assert loan.notes == ""
    assert loan.worker.id == worker.id
    assert [(i.name, i.quantity_lent, i.quantity_returned, i.detail) for i in loan.items] == [
        ("Llave", 3, 0, "30mm")
    ]


def test_create_loan_keeps_item_order_and_notes(db_session):
    worker = _create_worker(db_session)

    with transaction(db_session):
        loan = loan_services.create_loan(
            db_session,
            worker_id=worker.id,
            items=_items(
                ("Martillo", 1, "mango de fibra"),
                ("Taladro", 2, "percutor"),
                ("Llave", 4, "22mm"),
            ),
            notes="Obra norte",
        )

    loan = loan_services.get_loan(db_session, loan.id)
    assert [item.name for item in loan.items] == ["Martillo", "Taladro", "Llave"]
    assert loan.notes == "Obra norte"


def test_create_loan_for_unknown_worker_is_not_found(db_session):
    with pytest.raises(NotFoundError):
        loan_services.create_loan(db_session, worker_id=999, items=_items(("Llave", 1, "30mm")))


def test_create_loan_for_inactive_worker_is_not_found(db_session):
    worker = _create_worker(db_session, active=False)

    with pytest.raises(NotFoundError) as exc:
        loan_services.create_loan(db_session, worker_id=worker.id, items=_items(("Llave", 1, "30mm")))
    assert exc.value.message == "Trabajador no encontrado o inactivo"


def test_create_loan_requires_items(db_session):
    worker = _create_worker(db_session)

    with pytest.raises(InvalidArgumentError) as exc:
        loan_services.create_loan(db_session, worker_id=worker.id, items=[])
    assert exc.value.message == "Debe incluir al menos un ítem en el préstamo"
    assert db_session.query(loan_models.Loan).count() == 0


def test_create_loan_with_invalid_item_leaves_nothing_behind(db_session):
    worker = _create_worker(db_session)
    items = _items(("Llave", 2, "30mm")) + [
        loan_schemas.LoanItemCreate.model_construct(name="Sierra", quantity_lent=0, detail="")
    ]

    with pytest.raises(InvalidArgumentError):
        with transaction(db_session):
            loan_services.create_loan(db_session, worker_id=worker.id, items=items)

    assert db_session.query(loan_models.Loan).count() == 0
    assert db_session.query(loan_models.LoanItem).count() == 0


def test_get_loan_ignores_worker_active_flag(db_session):
    worker = _create_worker(db_session)
    with transaction(db_session):
        loan = loan_services.create_loan(
            db_session, worker_id=worker.id, items=_items(("Llave", 1, "30mm"))
        )
        loan.status = loan_models.LoanStatusEnum.COMPLETED
    worker.is_active = False
    db_session.commit()

    assert loan_services.get_loan(db_session, loan.id).id == loan.id
    assert loan_services.list_loans(db_session) == []


def test_get_loan_missing_is_not_found(db_session):
    with pytest.raises(NotFoundError) as exc:
        loan_services.get_loan(db_session, 42)
    assert exc.value.message == "Préstamo no encontrado"
