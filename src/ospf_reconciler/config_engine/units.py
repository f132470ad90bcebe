"""Cost unit normalization.

The device stores the auto-cost reference bandwidth as (value, unit).
Everything inside the engine works in Mbps, the finest unit.
"""
from enum import Enum
from typing import Union

from ..devices.base import InstanceHandle, OSPFDevice
from .errors import UnitConversionError


class CostUnit(str, Enum):
    """Reference bandwidth units reported by the device."""
    MBPS = "mbps"
    GBPS = "gbps"


CANONICAL_UNIT = CostUnit.MBPS

UNIT_MULTIPLIERS = {
    CostUnit.MBPS: 1,
    CostUnit.GBPS: 1000,
}


def parse_unit(unit: Union[str, CostUnit]) -> CostUnit:
    """Coerce a device-reported unit name to a CostUnit."""
    try:
        return CostUnit(str(getattr(unit, "value", unit)).lower())
    except ValueError:
        raise UnitConversionError(f"Unrecognized cost unit: {unit!r}") from None


def normalize(value: int, unit: Union[str, CostUnit]) -> int:
    """Convert a (value, unit) pair to Mbps."""
    return int(value) * UNIT_MULTIPLIERS[parse_unit(unit)]


async def device_default(device: OSPFDevice, handle: InstanceHandle) -> int:
    """Return the instance's built-in reference bandwidth in Mbps."""
    value, unit = await device.read_default_cost(handle)
    return normalize(value, unit)
