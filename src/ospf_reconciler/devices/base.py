"""Base device abstraction for OSPF VRF property access."""
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)


class DeviceError(Exception):
    """Raised by a device when a read or write call fails."""


@dataclass
class DeviceConfig:
    """Configuration for a managed device."""
    type: str
    name: str
    host: str = ""
    protocol: str = "memory"
    port: int = 0
    username: str = ""
    password: Optional[str] = None
    password_env: str = "NETWORK_PASSWORD"
    timeout: int = 30
    retries: int = 3
    retry_delay: float = 2
    # Seed state for simulated devices
    instances: list = field(default_factory=list)

    def get_password(self) -> str:
        """Get password from config or environment variable."""
        if self.password:
            return self.password
        return os.environ.get(self.password_env, "")


@dataclass(frozen=True)
class InstanceHandle:
    """Opaque reference to one OSPF VRF instance on a device."""
    process_id: str
    vrf_name: str


class OSPFDevice(ABC):
    """Abstract property accessor for the OSPF VRF table of one device.

    Handlers translate these calls into whatever transport the platform
    speaks. The engine never sees commands, only property names and values.
    """

    def __init__(self, device_id: str, config: DeviceConfig):
        self.device_id = device_id
        self.config = config
        self._connected = False

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def is_connected(self) -> bool:
        return self._connected

    # Connection management
    @abstractmethod
    async def connect(self) -> bool:
        """Establish a session with the device."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the session."""
        pass

    # Discovery
    @abstractmethod
    async def enumerate_instances(self) -> list[tuple[str, str, InstanceHandle]]:
        """List every (process_id, vrf_name, handle) known to the device."""
        pass

    @abstractmethod
    async def read_property(self, handle: InstanceHandle, name: str) -> Any:
        """Read a scalar property of an instance."""
        pass

    @abstractmethod
    async def read_cost(self, handle: InstanceHandle) -> tuple[int, str]:
        """Read the configured auto-cost as (value, unit)."""
        pass

    @abstractmethod
    async def read_default_cost(self, handle: InstanceHandle) -> tuple[int, str]:
        """Read the built-in auto-cost default as (value, unit)."""
        pass

    # Mutation
    @abstractmethod
    async def write_property(self, handle: InstanceHandle, name: str, value: Any) -> None:
        """Set a scalar property."""
        pass

    @abstractmethod
    async def write_cost(self, handle: InstanceHandle, value: int, unit: str) -> None:
        """Set the auto-cost reference bandwidth."""
        pass

    @abstractmethod
    async def write_grouped_timers(
        self,
        handle: InstanceHandle,
        group: str,
        start: int,
        hold: int,
        maximum: int,
    ) -> None:
        """Set all three throttle timers of a group in one call."""
        pass

    @abstractmethod
    async def create_instance(self, process_id: str, vrf_name: str) -> InstanceHandle:
        """Construct a new instance and return its handle."""
        pass

    @abstractmethod
    async def destroy_instance(self, handle: InstanceHandle) -> None:
        """Remove an instance."""
        pass

    # Context manager support
    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
        return False
