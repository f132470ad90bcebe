"""OSPF VRF reconciler - converge per-VRF OSPF settings to a declared state."""

__version__ = "0.1.0"
