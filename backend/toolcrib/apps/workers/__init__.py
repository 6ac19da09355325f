"""
Workers module.

People eligible to receive tool loans; soft-deactivated, never deleted.
"""

from . import models, schemas  # noqa: F401
