"""
Custom exception classes for hard failures.

Pure formulas raise these when their numeric input is malformed. Implausible
but computable results are never raised; they travel as warning lists on the
result objects instead.
"""
from typing import Optional


class EngineError(Exception):
    """Base engine exception with consistent structure."""

    def __init__(self, detail: str, error_code: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.error_code = error_code or "ENGINE_ERROR"


class InvalidInputError(EngineError):
    """Malformed numeric input (non-positive duration, power, pace...)."""

    def __init__(self, detail: str, field: Optional[str] = None):
        error_code = f"INVALID_INPUT_{field.upper()}" if field else "INVALID_INPUT"
        super().__init__(detail=detail, error_code=error_code)
        self.field = field


class UnknownDistanceError(EngineError):
    """Race distance label not recognized."""

    def __init__(self, label: str):
        super().__init__(
            detail=f"Unrecognized race distance: {label}",
            error_code="UNKNOWN_DISTANCE"
        )
        self.label = label


class InsufficientDataError(EngineError):
    """Not enough samples or trials for a fixed-window test."""

    def __init__(self, detail: str, required: int, received: int):
        super().__init__(detail=detail, error_code="INSUFFICIENT_DATA")
        self.required = required
        self.received = received
