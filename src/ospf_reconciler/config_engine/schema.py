"""Schema definitions for the reconciliation engine.

Defines resource identity, desired and discovered state, change sets,
mutation calls and result types.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..devices.base import InstanceHandle


PROTECTED_VRF = "default"


class Ensure(str, Enum):
    """Whether a resource should exist."""
    PRESENT = "present"
    ABSENT = "absent"


class Sentinel(Enum):
    """Marker values a desired property can take besides a literal."""
    DEFAULT = "default"

    def __repr__(self) -> str:
        return f"<{self.value}>"

    def __str__(self) -> str:
        return self.value


# "Reset to the device default"
DEFAULT = Sentinel.DEFAULT


class ChangeType(str, Enum):
    """What the engine did (or would do) to one resource."""
    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"
    NO_CHANGE = "no_change"


class LifecycleState(str, Enum):
    """Per-resource lifecycle state within one pass."""
    ABSENT = "absent"
    PRESENT_CLEAN = "present_clean"
    PRESENT_DIRTY = "present_dirty"
    DESTROYED = "destroyed"


@dataclass(frozen=True, order=True)
class InstanceId:
    """Composite key of an OSPF VRF instance."""
    process_id: str
    vrf_name: str

    @property
    def title(self) -> str:
        """Resource title, e.g. "core red"."""
        return f"{self.process_id} {self.vrf_name}"

    @property
    def is_protected(self) -> bool:
        return self.vrf_name == PROTECTED_VRF

    @classmethod
    def from_title(cls, title: str) -> "InstanceId":
        parts = str(title).split()
        if len(parts) != 2:
            raise ValueError(
                f"Invalid resource title {title!r}: expected '<ospf> <vrf>'"
            )
        return cls(parts[0], parts[1])

    def __str__(self) -> str:
        return self.title


@dataclass
class DesiredSpec:
    """Declared state for one instance; only named properties are managed."""
    identity: InstanceId
    ensure: Ensure = Ensure.PRESENT
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class ResourceRecord:
    """Current state of one instance as read from the device."""
    identity: InstanceId
    ensure: Ensure = Ensure.PRESENT
    properties: dict[str, Any] = field(default_factory=dict)
    # Device-computed defaults in canonical units (auto_cost)
    defaults: dict[str, Any] = field(default_factory=dict)
    handle: Optional[InstanceHandle] = None

    @property
    def name(self) -> str:
        return self.identity.title


@dataclass
class Binding:
    """A desired spec paired with its discovered record, if any."""
    desired: DesiredSpec
    current: Optional[ResourceRecord] = None
    intent: Optional[Ensure] = None
    state: LifecycleState = LifecycleState.ABSENT

    @property
    def identity(self) -> InstanceId:
        return self.desired.identity


@dataclass
class ChangeSet:
    """Pending property values needed to converge one instance."""
    identity: InstanceId
    changes: dict[str, Any] = field(default_factory=dict)
    # Built against no current record (new instance)
    initial: bool = False

    def __bool__(self) -> bool:
        return bool(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    def __contains__(self, name: object) -> bool:
        return name in self.changes

    def get(self, name: str, default: Any = None) -> Any:
        return self.changes.get(name, default)


class MutationKind(str, Enum):
    """Device call shape."""
    PROPERTY = "property"
    COST = "cost"
    GROUP = "group"


@dataclass(frozen=True)
class MutationCall:
    """One device write."""
    kind: MutationKind
    target: str
    values: tuple

    def describe(self) -> str:
        if self.kind == MutationKind.GROUP:
            return f"{self.target} {' '.join(str(v) for v in self.values)}"
        if self.kind == MutationKind.COST:
            value, unit = self.values
            return f"{self.target}={value} {unit}"
        return f"{self.target}={self.values[0]!r}"


# --- Validation Results ---

@dataclass
class ValidationResult:
    """Result of manifest validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# --- Execution ---

@dataclass
class ExecuteOptions:
    """Options for one reconciliation pass."""
    dry_run: bool = False
    audit_context: str = ""
    user: Optional[str] = None


@dataclass
class ResourceResult:
    """Outcome of reconciling one resource."""
    resource: str
    action: ChangeType = ChangeType.NO_CHANGE
    success: bool = False
    dry_run: bool = False
    calls: list[MutationCall] = field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "resource": self.resource,
            "action": self.action.value,
            "success": self.success,
            "dry_run": self.dry_run,
            "calls": [call.describe() for call in self.calls],
            "error": self.error,
            "error_type": self.error_type,
        }


@dataclass
class ReconcileReport:
    """Outcome of one reconciliation pass over a manifest."""
    device_id: str
    dry_run: bool = False
    results: list[ResourceResult] = field(default_factory=list)
    discovery_errors: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and all(r.success for r in self.results)

    @property
    def failed(self) -> list[ResourceResult]:
        return [r for r in self.results if not r.success]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "device_id": self.device_id,
            "dry_run": self.dry_run,
            "success": self.success,
            "results": [r.to_dict() for r in self.results],
            "discovery_errors": self.discovery_errors,
            "error": self.error,
        }


# --- Audit Entry ---

@dataclass
class AuditEntry:
    """Audit log entry for one applied resource."""
    timestamp: datetime
    device_id: str
    resource: str
    operation: str
    context: str = ""
    user: str = "system"
    success: bool = False
    changes: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class DesiredState:
    """Parsed manifest: every declared resource for one device."""
    device_id: str
    resources: dict[InstanceId, DesiredSpec] = field(default_factory=dict)
