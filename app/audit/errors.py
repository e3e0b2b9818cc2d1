# app/audit/errors.py
from enum import Enum
from typing import Optional


class FetchErrorKind(str, Enum):
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"


class AuditErrorKind(str, Enum):
    INVALID_URL = "invalid_url"
    FETCH_FAILED = "fetch_failed"


class FetchError(Exception):
    """The target page could not be retrieved."""

    def __init__(self, kind: FetchErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code


class AuditError(Exception):
    """An audit that ends without a report. `status_code` is the HTTP status to surface."""

    _STATUS = {
        AuditErrorKind.INVALID_URL: 400,
        AuditErrorKind.FETCH_FAILED: 502,
    }

    def __init__(self, kind: AuditErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = self._STATUS[kind]
