from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import status


class ServiceError(Exception):
    """
    Base class for failures raised by the service layer.

    `message` becomes the `mensaje` field of the response and `extra`
    is merged into the body (e.g. the list of pending items when a loan
    cannot be closed).
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal"

    def __init__(self, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_payload(self) -> Dict[str, Any]:
        return {"mensaje": self.message, **self.extra}


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InvalidArgumentError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_argument"


class InvalidStateError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_state"
