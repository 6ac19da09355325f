"""Overdue loan sweep.

Marks pending/in-progress loans delivered more than LOAN_DUE_DAYS ago as
overdue. Safe to run from cron: loans already overdue or completed are left
untouched.
"""

from __future__ import annotations

from datetime import datetime, timezone

from toolcrib.database import WriteSessionLocal
from toolcrib.apps.loans import services as loan_services


def run() -> dict:
    db = WriteSessionLocal()
    try:
        marked = loan_services.mark_overdue_loans(db, now=datetime.now(timezone.utc))
        db.commit()
        return {"updated": len(marked), "loan_ids": marked}
    finally:
        db.close()


if __name__ == "__main__":
    result = run()
    print("Overdue loan sweep completed:", result)
