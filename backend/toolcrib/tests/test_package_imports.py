from __future__ import annotations

import sys

from toolcrib.apps.loans import models as loan_models
from toolcrib.apps.products import models as product_models
from toolcrib.apps.workers import models as worker_models
from toolcrib.database import Base


def test_app_models_are_registered_once():
    # App packages must only ever load under their dotted toolcrib path.
    for short_name in ("loans", "products", "workers"):
        assert f"{short_name}.models" not in sys.modules

    assert Base.metadata.tables["loans"] is loan_models.Loan.__table__
    assert Base.metadata.tables["loan_items"] is loan_models.LoanItem.__table__
    assert Base.metadata.tables["products"] is product_models.Product.__table__
    assert Base.metadata.tables["workers"] is worker_models.Worker.__table__
