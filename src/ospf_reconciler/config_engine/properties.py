"""Static catalog of managed OSPF VRF properties.

One entry per managed property. Grouped properties can only be written
together through a single device call, so each group lists its members
in the positional order the device expects.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional


AUTO_COST = "auto_cost"

TIMER_THROTTLE_LSA = "timer_throttle_lsa"
TIMER_THROTTLE_SPF = "timer_throttle_spf"


@dataclass(frozen=True)
class PropertySpec:
    """A single managed property."""
    name: str
    kind: type
    default: Any = None
    group: Optional[str] = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    choices: Optional[frozenset] = None
    # Default is reported by the device rather than known up front
    device_default: bool = False
    # Stored on the device as a (value, unit) pair
    derived: bool = False


_SPECS = (
    PropertySpec("default_metric", int, default=0, minimum=1, maximum=16777214),
    PropertySpec(
        "log_adjacency", str, default="none",
        choices=frozenset({"none", "log", "detail"}),
    ),
    PropertySpec("router_id", str, default=""),
    PropertySpec(
        "timer_throttle_lsa_start", int, default=0,
        group=TIMER_THROTTLE_LSA, minimum=0, maximum=5000,
    ),
    PropertySpec(
        "timer_throttle_lsa_hold", int, default=5000,
        group=TIMER_THROTTLE_LSA, minimum=50, maximum=30000,
    ),
    PropertySpec(
        "timer_throttle_lsa_max", int, default=5000,
        group=TIMER_THROTTLE_LSA, minimum=50, maximum=30000,
    ),
    PropertySpec(
        "timer_throttle_spf_start", int, default=200,
        group=TIMER_THROTTLE_SPF, minimum=1, maximum=600000,
    ),
    PropertySpec(
        "timer_throttle_spf_hold", int, default=1000,
        group=TIMER_THROTTLE_SPF, minimum=1, maximum=600000,
    ),
    PropertySpec(
        "timer_throttle_spf_max", int, default=5000,
        group=TIMER_THROTTLE_SPF, minimum=1, maximum=600000,
    ),
    PropertySpec(
        AUTO_COST, int, minimum=1, maximum=4000000,
        device_default=True, derived=True,
    ),
)

PROPERTY_SPECS: Mapping[str, PropertySpec] = MappingProxyType(
    {spec.name: spec for spec in _SPECS}
)

PROPERTY_GROUPS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    TIMER_THROTTLE_LSA: (
        "timer_throttle_lsa_start",
        "timer_throttle_lsa_hold",
        "timer_throttle_lsa_max",
    ),
    TIMER_THROTTLE_SPF: (
        "timer_throttle_spf_start",
        "timer_throttle_spf_hold",
        "timer_throttle_spf_max",
    ),
})

# Plain properties the device reads and writes one at a time
SCALAR_PROPERTIES: tuple[str, ...] = tuple(
    spec.name for spec in _SPECS if not spec.derived
)


def get_spec(name: str) -> PropertySpec:
    """Look up a property by name, raising KeyError for unmanaged names."""
    try:
        return PROPERTY_SPECS[name]
    except KeyError:
        raise KeyError(f"Unknown OSPF VRF property: {name}") from None
