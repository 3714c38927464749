"""
Typed API failures.

Handlers raise these and let them propagate; ``app.main`` registers a single
exception handler that turns them into ``{"detail": message}`` responses.
"""
from __future__ import annotations

from fastapi import status


class APIError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(APIError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND
