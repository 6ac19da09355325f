"""
Products module.

Stock items with in/out quantity adjustments and inventory statistics.
"""

from . import models, schemas  # noqa: F401
