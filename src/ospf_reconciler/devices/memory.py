"""In-memory OSPF VRF table.

Behaves like a device holding `router ospf <id>` / `vrf <name>` blocks.
Used for tests and for local dry runs against an inventory seed.

Every call is appended to `calls` so tests can assert exactly which
device operations the engine issued.
"""
import copy
import logging
from typing import Any, Optional

from .base import DeviceConfig, DeviceError, InstanceHandle, OSPFDevice

logger = logging.getLogger(__name__)

# Factory settings of a freshly created VRF
FACTORY_DEFAULTS = {
    "default_metric": 0,
    "log_adjacency": "none",
    "router_id": "",
    "timer_throttle_lsa_start": 0,
    "timer_throttle_lsa_hold": 5000,
    "timer_throttle_lsa_max": 5000,
    "timer_throttle_spf_start": 200,
    "timer_throttle_spf_hold": 1000,
    "timer_throttle_spf_max": 5000,
}

FACTORY_COST = (40, "gbps")

TIMER_GROUPS = {
    "timer_throttle_lsa": ("timer_throttle_lsa_start", "timer_throttle_lsa_hold", "timer_throttle_lsa_max"),
    "timer_throttle_spf": ("timer_throttle_spf_start", "timer_throttle_spf_hold", "timer_throttle_spf_max"),
}


class MemoryDevice(OSPFDevice):
    """Simulated device keeping its OSPF VRF table in a dict."""

    def __init__(self, device_id: str, config: DeviceConfig):
        super().__init__(device_id, config)
        self._instances: dict[tuple[str, str], dict[str, Any]] = {}
        self.calls: list[tuple] = []
        # Fault injection
        self.fail_reads: set[tuple[str, str]] = set()
        self.fail_writes: set[str] = set()
        self.connect_failures = 0
        # Exception type raised by injected read/write failures
        self.fault: type[Exception] = DeviceError

        for seed in config.instances:
            self.seed_instance(
                str(seed["ospf"]),
                str(seed["vrf"]),
                properties=seed.get("properties"),
                cost=tuple(seed["auto_cost"]) if seed.get("auto_cost") else None,
                default_cost=tuple(seed["default_auto_cost"]) if seed.get("default_auto_cost") else None,
            )

    def seed_instance(
        self,
        process_id: str,
        vrf_name: str,
        properties: Optional[dict] = None,
        cost: Optional[tuple] = None,
        default_cost: Optional[tuple] = None,
    ) -> InstanceHandle:
        """Install an instance without recording a device call."""
        state = dict(FACTORY_DEFAULTS)
        state.update(properties or {})
        state["__default_cost__"] = tuple(default_cost or FACTORY_COST)
        state["__cost__"] = tuple(cost or state["__default_cost__"])
        self._instances[(process_id, vrf_name)] = state
        return InstanceHandle(process_id, vrf_name)

    def state_of(self, process_id: str, vrf_name: str) -> dict[str, Any]:
        """Copy of an instance's stored values, for assertions."""
        return copy.deepcopy(self._instances[(process_id, vrf_name)])

    def has_instance(self, process_id: str, vrf_name: str) -> bool:
        return (process_id, vrf_name) in self._instances

    def _lookup(self, handle: InstanceHandle) -> dict[str, Any]:
        key = (handle.process_id, handle.vrf_name)
        if key not in self._instances:
            raise DeviceError(f"No OSPF instance {handle.process_id} vrf {handle.vrf_name}")
        return self._instances[key]

    def _check_read(self, handle: InstanceHandle) -> None:
        if (handle.process_id, handle.vrf_name) in self.fail_reads:
            raise self.fault(
                f"Read timed out for {handle.process_id} vrf {handle.vrf_name}"
            )

    def _check_write(self, target: str) -> None:
        if target in self.fail_writes:
            raise self.fault(f"Write rejected for {target}")

    async def connect(self) -> bool:
        if self.connect_failures > 0:
            self.connect_failures -= 1
            raise ConnectionRefusedError(f"{self.device_id} refused connection")
        self._connected = True
        return True

    async def disconnect(self) -> None:
        self._connected = False

    async def enumerate_instances(self) -> list[tuple[str, str, InstanceHandle]]:
        self.calls.append(("enumerate_instances",))
        return [
            (process_id, vrf_name, InstanceHandle(process_id, vrf_name))
            for process_id, vrf_name in sorted(self._instances)
        ]

    async def read_property(self, handle: InstanceHandle, name: str) -> Any:
        self.calls.append(("read_property", handle, name))
        self._check_read(handle)
        state = self._lookup(handle)
        if name not in FACTORY_DEFAULTS:
            raise DeviceError(f"Unsupported property: {name}")
        return state[name]

    async def read_cost(self, handle: InstanceHandle) -> tuple[int, str]:
        self.calls.append(("read_cost", handle))
        self._check_read(handle)
        return self._lookup(handle)["__cost__"]

    async def read_default_cost(self, handle: InstanceHandle) -> tuple[int, str]:
        self.calls.append(("read_default_cost", handle))
        self._check_read(handle)
        return self._lookup(handle)["__default_cost__"]

    async def write_property(self, handle: InstanceHandle, name: str, value: Any) -> None:
        self.calls.append(("write_property", handle, name, value))
        self._check_write(name)
        state = self._lookup(handle)
        if name not in FACTORY_DEFAULTS:
            raise DeviceError(f"Unsupported property: {name}")
        state[name] = value

    async def write_cost(self, handle: InstanceHandle, value: int, unit: str) -> None:
        self.calls.append(("write_cost", handle, value, unit))
        self._check_write("auto_cost")
        self._lookup(handle)["__cost__"] = (value, unit)

    async def write_grouped_timers(
        self,
        handle: InstanceHandle,
        group: str,
        start: int,
        hold: int,
        maximum: int,
    ) -> None:
        self.calls.append(("write_grouped_timers", handle, group, start, hold, maximum))
        self._check_write(group)
        if group not in TIMER_GROUPS:
            raise DeviceError(f"Unsupported timer group: {group}")
        state = self._lookup(handle)
        for member, value in zip(TIMER_GROUPS[group], (start, hold, maximum)):
            state[member] = value

    async def create_instance(self, process_id: str, vrf_name: str) -> InstanceHandle:
        self.calls.append(("create_instance", process_id, vrf_name))
        self._check_write("create")
        if (process_id, vrf_name) in self._instances:
            raise DeviceError(f"OSPF instance {process_id} vrf {vrf_name} already exists")
        logger.debug(f"{self.device_id}: router ospf {process_id} / vrf {vrf_name}")
        return self.seed_instance(process_id, vrf_name)

    async def destroy_instance(self, handle: InstanceHandle) -> None:
        self.calls.append(("destroy_instance", handle))
        self._check_write("destroy")
        self._lookup(handle)
        del self._instances[(handle.process_id, handle.vrf_name)]

    def mutation_calls(self) -> list[tuple]:
        """Recorded calls that change device state."""
        return [
            call for call in self.calls
            if call[0] in (
                "write_property", "write_cost", "write_grouped_timers",
                "create_instance", "destroy_instance",
            )
        ]
