"""Tests for cost unit normalization."""
import pytest

from ospf_reconciler.config_engine import (
    CostUnit,
    UnitConversionError,
    device_default,
    normalize,
)
from ospf_reconciler.devices.base import InstanceHandle


class TestNormalize:
    """Tests for normalize()."""

    def test_mbps_unchanged(self):
        """Mbps is already canonical."""
        assert normalize(100, "mbps") == 100

    def test_gbps_scaled(self):
        """One Gbps step is x1000."""
        assert normalize(40, "gbps") == 40000

    def test_unit_case_insensitive(self):
        """Devices report units in mixed case."""
        assert normalize(2, "Gbps") == 2000

    def test_accepts_enum(self):
        """CostUnit members work as well as strings."""
        assert normalize(3, CostUnit.GBPS) == 3000

    def test_unknown_unit_raises(self):
        """Unrecognized scale is a hard error."""
        with pytest.raises(UnitConversionError) as exc:
            normalize(1, "tbps")
        assert "tbps" in str(exc.value)


class TestDeviceDefault:
    """Tests for device_default()."""

    @pytest.mark.asyncio
    async def test_default_in_canonical_units(self, device):
        """200 Gbps default comes back as 200000."""
        assert await device_default(device, InstanceHandle("1", "red")) == 200000

    @pytest.mark.asyncio
    async def test_factory_default(self, device):
        """Instances without a seeded default use the 40 Gbps factory value."""
        assert await device_default(device, InstanceHandle("2", "blue")) == 40000
