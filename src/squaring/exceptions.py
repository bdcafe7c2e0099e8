"""
Error taxonomy for the squaring engine.

Every error a caller is expected to show to the user derives from
SquaringError; its message is human-readable as-is.
"""


class SquaringError(Exception):
    """Base class for user-facing perspective correction failures."""


class InvalidControlPoints(SquaringError, ValueError):
    """Raised when anything other than exactly 4 control points is supplied."""

    def __init__(self, count: int, detail: str = ""):
        self.count = count
        message = f"Exactly 4 control points are required, got {count}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DegenerateControlPoints(SquaringError, ValueError):
    """Raised when the control points cannot define a rectangle mapping."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            f"Control points are degenerate and cannot form a rectangle: {reason}"
        )


class CorrectionCancelled(SquaringError):
    """Raised when a caller-supplied cancellation signal stops resampling."""


class SingularMatrix(ArithmeticError):
    """
    Internal signal from the linear solver and transform construction.

    Translated to DegenerateControlPoints before reaching callers.
    """
