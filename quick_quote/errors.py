"""
Error taxonomy for the quoting core.

User-facing errors (validation, selection preconditions, structural row
rules) are raised by precondition helpers and converted into
`SHOW_NOTIFICATION` events by the handler that detected them. They never
reach the event bus.

`ConfigurationError` signals a programming or configuration fault (an
action type without a reducer, a product without rules, a malformed
configuration file). It is never converted into a notification.
"""

from typing import Any, Dict, Optional


class QuoteError(Exception):
    """Base class for all errors raised by the quoting core."""


class UserFacingError(QuoteError):
    """An error surfaced to the user as a notification."""

    notification_type = "error"

    def __init__(self, message: str, notification_type: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if notification_type is not None:
            self.notification_type = notification_type

    def to_notification(self) -> Dict[str, str]:
        """Payload for a `SHOW_NOTIFICATION` event."""
        return {"message": self.message, "type": self.notification_type}

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": type(self).__name__, **self.to_notification()}


class ValidationError(UserFacingError):
    """Input outside product bounds, or an item that cannot be priced."""

    def __init__(
        self,
        row_index: int,
        column: str,
        message: str,
        min: Optional[float] = None,
        max: Optional[float] = None,
    ):
        super().__init__(message)
        self.row_index = row_index
        self.column = column
        self.min = min
        self.max = max

    def __str__(self) -> str:
        return f"row {self.row_index} [{self.column}]: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "row_index": self.row_index,
            "column": self.column,
            "min": self.min,
            "max": self.max,
        })
        return data


class SelectionPreconditionError(UserFacingError):
    """Wrong number of selected rows for a row command."""


class StructuralError(UserFacingError):
    """Illegal row position for an insert."""


class DialogCancelled(QuoteError):
    """The user chose cancel in a choice prompt. Always a silent no-op."""


class ConfigurationError(QuoteError):
    """Programming-integrity fault. Must not be swallowed."""
