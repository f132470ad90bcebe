"""Config Engine - declarative reconciliation of OSPF VRF instances.

The engine converges each declared OSPF VRF to its desired properties:
- Discover every instance on the device
- Bind declared resources to discovered ones
- Diff only the declared properties, resolving "default" values
- Batch throttle timers into one grouped write per group
- Refuse to remove the default VRF

Usage:
    from ospf_reconciler.config_engine import ReconcileEngine

    engine = ReconcileEngine(inventory)
    report = await engine.apply_manifest({
        "device": "nexus-lab",
        "ospf_vrfs": {
            "core red": {
                "auto_cost": "default",
                "timer_throttle_lsa_hold": 6000,
            }
        }
    }, dry_run=True)
"""

from .engine import ReconcileEngine
from .schema import (
    DEFAULT,
    Binding,
    ChangeSet,
    ChangeType,
    DesiredSpec,
    DesiredState,
    Ensure,
    ExecuteOptions,
    InstanceId,
    LifecycleState,
    MutationCall,
    MutationKind,
    ReconcileReport,
    ResourceRecord,
    ResourceResult,
    ValidationResult,
)
from .errors import (
    ReconcileError,
    DiscoveryReadError,
    PolicyViolation,
    UnitConversionError,
    MutationError,
)
from .properties import PROPERTY_SPECS, PROPERTY_GROUPS, PropertySpec
from .units import CostUnit, normalize, device_default
from .parser import ManifestParser, ParseError
from .validator import ManifestValidator
from .discovery import InstanceDiscovery
from .binder import DesiredStateBinder
from .diff import ChangeSetAccumulator, resolve_default, summarize_changes
from .planner import GroupedMutationPlanner
from .executor import MutationExecutor
from .lifecycle import LifecycleController

__all__ = [
    # Main engine
    "ReconcileEngine",
    # Schema classes
    "DEFAULT",
    "Binding",
    "ChangeSet",
    "ChangeType",
    "DesiredSpec",
    "DesiredState",
    "Ensure",
    "ExecuteOptions",
    "InstanceId",
    "LifecycleState",
    "MutationCall",
    "MutationKind",
    "ReconcileReport",
    "ResourceRecord",
    "ResourceResult",
    "ValidationResult",
    # Errors
    "ReconcileError",
    "DiscoveryReadError",
    "PolicyViolation",
    "UnitConversionError",
    "MutationError",
    "ParseError",
    # Property catalog
    "PROPERTY_SPECS",
    "PROPERTY_GROUPS",
    "PropertySpec",
    "CostUnit",
    "normalize",
    "device_default",
    # Components (for advanced use)
    "ManifestParser",
    "ManifestValidator",
    "InstanceDiscovery",
    "DesiredStateBinder",
    "ChangeSetAccumulator",
    "resolve_default",
    "summarize_changes",
    "GroupedMutationPlanner",
    "MutationExecutor",
    "LifecycleController",
]
