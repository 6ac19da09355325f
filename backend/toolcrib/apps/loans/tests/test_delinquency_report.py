from __future__ import annotations

from datetime import datetime, timezone

from toolcrib.apps.loans import models as loan_models
from toolcrib.apps.loans import services as loan_services
from toolcrib.apps.workers import models as worker_models


def _worker(db, code, name, active=True):
    worker = worker_models.Worker(code=code, name=name, is_active=active)
    db.add(worker)
    db.flush()
    return worker


def _loan(db, worker, delivered_at, items, status=loan_models.LoanStatusEnum.PENDING):
    loan = loan_models.Loan(worker_id=worker.id, delivered_at=delivered_at, status=status, notes="")
    db.add(loan)
    db.flush()
    for name, lent, returned in items:
        db.add(
            loan_models.LoanItem(
                loan_id=loan.id,
                name=name,
                quantity_lent=lent,
                quantity_returned=returned,
                detail="",
            )
        )
    db.flush()
    return loan


def test_report_groups_pending_items_by_worker(db_session):
    zoe = _worker(db_session, "T-2", "Zoe")
    ana = _worker(db_session, "T-1", "Ana")
    _loan(db_session, zoe, datetime(2026, 3, 1, tzinfo=timezone.utc), [("Llave", 3, 1)])
    _loan(
        db_session,
        ana,
        datetime(2026, 3, 5, tzinfo=timezone.utc),
        [("Martillo", 2, 0), ("Nivel", 1, 1)],
        status=loan_models.LoanStatusEnum.IN_PROGRESS,
    )
    _loan(db_session, ana, datetime(2026, 3, 2, tzinfo=timezone.utc), [("Taladro", 1, 0)])
    db_session.commit()

    report = loan_services.delinquency_report(db_session)

    assert [group.trabajador.nombre for group in report] == ["Ana", "Zoe"]
    ana_group, zoe_group = report
    assert ana_group.id == ana.id
    assert [item.nombre for item in ana_group.itemsPendientes] == ["Taladro", "Martillo"]
    assert [item.pendiente for item in ana_group.itemsPendientes] == [1, 2]
    assert ana_group.totalPendiente == 3
    assert ana_group.fechaPrestamoMasAntiguo.day == 2
    assert zoe_group.totalPendiente == 2
    assert zoe_group.itemsPendientes[0].cantidadPrestada == 3
    assert zoe_group.itemsPendientes[0].cantidadDevuelta == 1


def test_report_skips_completed_loans_and_inactive_workers(db_session):
    active = _worker(db_session, "T-1", "Ana")
    inactive = _worker(db_session, "T-2", "Beto", active=False)
    when = datetime(2026, 3, 1, tzinfo=timezone.utc)
    _loan(db_session, active, when, [("Llave", 3, 3)])
    _loan(
        db_session,
        active,
        when,
        [("Martillo", 2, 2)],
        status=loan_models.LoanStatusEnum.COMPLETED,
    )
    _loan(db_session, inactive, when, [("Taladro", 1, 0)])
    db_session.commit()

    assert loan_services.delinquency_report(db_session) == []


def test_report_includes_overdue_loans(db_session):
    worker = _worker(db_session, "T-1", "Ana")
    _loan(
        db_session,
        worker,
        datetime(2026, 1, 1, tzinfo=timezone.utc),
        [("Llave", 2, 0)],
        status=loan_models.LoanStatusEnum.OVERDUE,
    )
    db_session.commit()

    report = loan_services.delinquency_report(db_session)

    assert len(report) == 1
    assert report[0].totalPendiente == 2
