# backend/toolcrib/__init__.py
"""
Import ORM models from each app so that:

- Alembic and Base.metadata.create_all() see all tables.
- Relationship targets ("Worker", "Loan", "LoanItem") resolve regardless
  of which app module is imported first.

The actual model classes are kept in toolcrib/apps/*/models.py.
"""

from .apps.products import models as products_models   # stock items
from .apps.workers import models as workers_models     # loan recipients
from .apps.loans import models as loans_models         # loans + loan items

__all__ = [
    "products_models",
    "workers_models",
    "loans_models",
]
