# =============================================================================
# Error Handling Types (Result + Error)
# =============================================================================
# Every external call (subprocess, SQLite, HTTP, JSON) returns a Result so
# callers can turn failures into neutral launcher output instead of raising.

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar('T')


class ErrorType(Enum):
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"
    TIMEOUT_ERROR = "timeout_error"
    PARSE_ERROR = "parse_error"
    VALIDATION_ERROR = "validation_error"
    PERMISSION_ERROR = "permission_error"


@dataclass
class Error:
    error_type: ErrorType
    message: str
    context: dict = field(default_factory=dict)
    original_exception: Exception = None


@dataclass
class Result(Generic[T]):
    success: bool
    value: T = None
    error: Error = None

    @staticmethod
    def ok(value: T = None) -> 'Result[T]':
        return Result(success=True, value=value)

    @staticmethod
    def err(error: Error) -> 'Result[T]':
        return Result(success=False, error=error)

    def is_ok(self) -> bool:
        return self.success

    def is_err(self) -> bool:
        return not self.success

    def value_or(self, default: T) -> T:
        """Return the value on success, otherwise ``default``."""
        return self.value if self.success else default
