"""Error types raised by the reconciliation engine."""
from typing import Optional

from ..devices.base import DeviceError


class ReconcileError(Exception):
    """Base class for reconciliation failures scoped to one resource."""

    def __init__(self, message: str, resource: Optional[str] = None):
        self.message = message
        self.resource = resource
        if resource:
            super().__init__(f"{resource}: {message}")
        else:
            super().__init__(message)


class DiscoveryReadError(ReconcileError):
    """A property read failed while discovering one instance."""


class PolicyViolation(ReconcileError):
    """The requested operation is not permitted for this instance."""


class UnitConversionError(ReconcileError):
    """The device reported a cost unit with no known scale."""


class MutationError(ReconcileError):
    """A write, create or destroy call failed on the device."""


def describe_error(error: Exception) -> str:
    """Error text for reports; transport errors keep their type name."""
    if isinstance(error, (DeviceError, ReconcileError)):
        return str(error)
    return f"{type(error).__name__}: {error}"
