"""Device handlers exposing the OSPF VRF property interface."""
from .base import OSPFDevice, DeviceConfig, DeviceError, InstanceHandle
from .memory import MemoryDevice

__all__ = [
    "OSPFDevice",
    "DeviceConfig",
    "DeviceError",
    "InstanceHandle",
    "MemoryDevice",
]

# Device type registry
DEVICE_TYPES = {
    "memory": MemoryDevice,
}


def create_device(device_id: str, config: dict) -> OSPFDevice:
    """Factory function to create device instances."""
    device_type = config.get("type", "").lower()
    if device_type not in DEVICE_TYPES:
        raise ValueError(f"Unknown device type: {device_type}")

    device_class = DEVICE_TYPES[device_type]
    return device_class(device_id, DeviceConfig(**config))
