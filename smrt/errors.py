# smrt/errors.py
import asyncio

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError


class BadRequest(HTTPException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


# failures of the store itself: SQLAlchemy's own errors, plus driver socket
# errors and connect timeouts it does not wrap
STORE_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)
