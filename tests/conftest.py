"""Shared fixtures: a seeded in-memory device and an inventory around it."""
import pytest

from ospf_reconciler.config.inventory import DeviceInventory
from ospf_reconciler.devices.base import DeviceConfig
from ospf_reconciler.devices.memory import MemoryDevice


@pytest.fixture
def device():
    """Device with three OSPF VRFs.

    1 default - factory settings
    1 red     - tuned timers, cost left at its 200 Gbps default
    2 blue    - explicit 100000 Mbps cost, detail logging
    """
    dev = MemoryDevice("nexus-lab", DeviceConfig(type="memory", name="Lab Nexus"))
    dev.seed_instance("1", "default")
    dev.seed_instance(
        "1", "red",
        properties={
            "default_metric": 100,
            "timer_throttle_lsa_start": 10,
            "timer_throttle_lsa_hold": 4000,
            "timer_throttle_lsa_max": 8000,
        },
        cost=(200, "gbps"),
        default_cost=(200, "gbps"),
    )
    dev.seed_instance(
        "2", "blue",
        properties={"log_adjacency": "detail", "router_id": "10.0.0.2"},
        cost=(100000, "mbps"),
    )
    return dev


@pytest.fixture
def inventory(tmp_path, device):
    """Inventory whose nexus-lab entry is the seeded device."""
    path = tmp_path / "devices.yaml"
    path.write_text("devices:\n  nexus-lab:\n    type: memory\n")
    inv = DeviceInventory(str(path))
    inv.add_device(device)
    return inv
