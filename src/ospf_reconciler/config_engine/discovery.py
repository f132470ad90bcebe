"""Instance discovery.

Builds a complete current-state record for every OSPF VRF on the device.
"""
import logging
from typing import Optional

from ..devices.base import InstanceHandle, OSPFDevice
from ..utils.logging_config import timed
from .errors import DiscoveryReadError, describe_error
from .properties import AUTO_COST, SCALAR_PROPERTIES
from .schema import Ensure, InstanceId, ResourceRecord
from . import units

logger = logging.getLogger(__name__)


class InstanceDiscovery:
    """Snapshot the device's OSPF VRF table."""

    def __init__(self, device: OSPFDevice):
        self.device = device
        self.errors: list[DiscoveryReadError] = []

    @property
    def device_id(self) -> str:
        return self.device.device_id

    @timed("discover")
    async def discover_all(self) -> list[ResourceRecord]:
        """
        Read every instance known to the device.

        An instance whose reads fail is logged and left out; the rest
        are still returned. Each call re-queries the device.

        Returns:
            One present ResourceRecord per readable instance
        """
        self.errors = []
        records = []

        for process_id, vrf_name, handle in await self.device.enumerate_instances():
            identity = InstanceId(str(process_id), str(vrf_name))
            try:
                records.append(await self.read_instance(identity, handle))
            except Exception as e:
                error = DiscoveryReadError(describe_error(e), resource=identity.title)
                logger.warning(f"Skipping {identity}: {error.message}")
                self.errors.append(error)

        logger.info(
            f"Discovered {len(records)} OSPF VRF instance(s) on {self.device_id}"
            + (f", {len(self.errors)} unreadable" if self.errors else "")
        )
        return records

    async def read_instance(
        self,
        identity: InstanceId,
        handle: Optional[InstanceHandle] = None
    ) -> ResourceRecord:
        """
        Read one instance into a fully populated record.

        Raises:
            DeviceError: If any property read fails
            UnitConversionError: If the cost unit is not recognized
        """
        logger.debug(f"Checking ospf instance, {identity.process_id} {identity.vrf_name}")
        if handle is None:
            handle = InstanceHandle(identity.process_id, identity.vrf_name)

        properties = {}
        for name in SCALAR_PROPERTIES:
            properties[name] = await self.device.read_property(handle, name)

        cost_value, cost_unit = await self.device.read_cost(handle)
        properties[AUTO_COST] = units.normalize(cost_value, cost_unit)
        default_cost = await units.device_default(self.device, handle)

        record = ResourceRecord(
            identity=identity,
            ensure=Ensure.PRESENT,
            properties=properties,
            defaults={AUTO_COST: default_cost},
            handle=handle,
        )
        logger.debug(f"{identity}: {record.properties}")
        return record
