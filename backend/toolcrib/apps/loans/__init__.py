"""
Loans module.

Tool loans to workers, partial/full returns, delinquency reporting.

NOTE:
Only models and schemas are imported at package import time; services
and the router depend on the workers app and are imported explicitly.
"""

from . import models, schemas  # noqa: F401
