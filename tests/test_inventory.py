"""Tests for device inventory management."""
import os
import tempfile

import pytest

from ospf_reconciler.config.inventory import DeviceInventory
from ospf_reconciler.devices.base import InstanceHandle
from ospf_reconciler.devices.memory import MemoryDevice


class TestDeviceInventory:
    """Tests for DeviceInventory class."""

    @pytest.fixture
    def temp_config(self):
        """Create a temporary config file for testing."""
        config_content = """
audit_log_path: /tmp/ospf-audit.jsonl

defaults:
  password_env: "TEST_PASSWORD"
  timeout: 30
  retries: 3

devices:
  nexus-lab:
    type: memory
    name: "Lab Nexus"
    instances:
      - ospf: "1"
        vrf: default
      - ospf: 1
        vrf: red
        properties:
          default_metric: 100
        auto_cost: [200, gbps]

  nexus-core:
    type: memory
    host: 10.0.0.1
"""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(config_content)
            f.flush()
            yield f.name
        os.unlink(f.name)

    def test_load_config(self, temp_config):
        """Inventory loads config file correctly."""
        inv = DeviceInventory(temp_config)
        assert inv.get_device_ids() == ["nexus-lab", "nexus-core"]

    def test_defaults_merged(self, temp_config):
        """Defaults fill in missing keys and name falls back to the id."""
        inv = DeviceInventory(temp_config)
        config = inv.get_device_config("nexus-core")
        assert config["timeout"] == 30
        assert config["retries"] == 3
        assert config["password_env"] == "TEST_PASSWORD"
        assert config["name"] == "nexus-core"

    def test_get_device_unknown(self, temp_config):
        """Unknown device raises KeyError."""
        inv = DeviceInventory(temp_config)
        with pytest.raises(KeyError) as exc_info:
            inv.get_device_config("nonexistent")
        assert "Unknown device" in str(exc_info.value)

    def test_get_device_seeded(self, temp_config):
        """Memory devices are built with their seeded instances."""
        inv = DeviceInventory(temp_config)
        device = inv.get_device("nexus-lab")
        assert isinstance(device, MemoryDevice)
        assert device.name == "Lab Nexus"
        assert device.has_instance("1", "default")
        state = device.state_of("1", "red")
        assert state["default_metric"] == 100
        assert state["__cost__"] == (200, "gbps")

    def test_get_device_cached(self, temp_config):
        """Device instances are cached."""
        inv = DeviceInventory(temp_config)
        assert inv.get_device("nexus-lab") is inv.get_device("nexus-lab")

    def test_audit_log_path(self, temp_config):
        inv = DeviceInventory(temp_config)
        assert inv.audit_log_path == "/tmp/ospf-audit.jsonl"

    def test_add_device(self, temp_config, device):
        """Prebuilt handlers can be registered directly."""
        inv = DeviceInventory(temp_config)
        inv.add_device(device)
        assert inv.get_device("nexus-lab") is device
        assert inv.get_device_config("nexus-lab")["type"] == "memory"

    @pytest.mark.asyncio
    async def test_close_all(self, temp_config):
        """Open sessions are closed and the cache cleared."""
        inv = DeviceInventory(temp_config)
        device = inv.get_device("nexus-lab")
        await device.connect()

        await inv.close_all()

        assert not device.is_connected
        assert inv.get_device("nexus-lab") is not device

    def test_missing_config(self, tmp_path, monkeypatch):
        """No config in any search path raises FileNotFoundError."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        if os.path.exists("/etc/ospf-reconciler/devices.yaml"):
            pytest.skip("system inventory present")
        with pytest.raises(FileNotFoundError):
            DeviceInventory()

    def test_config_found_in_cwd(self, tmp_path, monkeypatch):
        """./configs/devices.yaml is picked up without an explicit path."""
        (tmp_path / "configs").mkdir()
        (tmp_path / "configs" / "devices.yaml").write_text(
            "devices:\n  edge:\n    type: memory\n"
        )
        monkeypatch.chdir(tmp_path)
        inv = DeviceInventory()
        assert inv.get_device_ids() == ["edge"]


class TestSeededDiscovery:
    """A seeded inventory device answers discovery calls."""

    @pytest.mark.asyncio
    async def test_enumerate(self, tmp_path):
        path = tmp_path / "devices.yaml"
        path.write_text(
            "devices:\n"
            "  lab:\n"
            "    type: memory\n"
            "    instances:\n"
            "      - {ospf: '5', vrf: blue}\n"
        )
        device = DeviceInventory(str(path)).get_device("lab")
        instances = await device.enumerate_instances()
        assert instances == [("5", "blue", InstanceHandle("5", "blue"))]
