"""Parser for desired state manifests.

Converts dict/YAML input to DesiredState objects.
"""
from typing import Any

import yaml

from .properties import PROPERTY_SPECS
from .schema import DEFAULT, DesiredSpec, DesiredState, Ensure, InstanceId

RESERVED_KEYS = {"ensure", "ospf", "vrf", "name"}


class ParseError(Exception):
    """Error parsing desired state configuration."""
    pass


class ManifestParser:
    """Parse desired state from dict/YAML format."""

    def parse(self, config: dict[str, Any]) -> DesiredState:
        """
        Parse a manifest dict into a DesiredState object.

        Args:
            config: Dict with device and ospf_vrfs

        Returns:
            DesiredState object

        Raises:
            ParseError: If the manifest is malformed
        """
        if not isinstance(config, dict):
            raise ParseError("Manifest must be a mapping")

        device_id = config.get("device_id") or config.get("device")
        if not device_id:
            raise ParseError("Missing required field: device_id or device")

        state = DesiredState(device_id=device_id)
        entries = config.get("ospf_vrfs") or {}

        if isinstance(entries, dict):
            items = [(title, body) for title, body in entries.items()]
        elif isinstance(entries, list):
            items = [(None, body) for body in entries]
        else:
            raise ParseError("ospf_vrfs must be a mapping or a list")

        for title, body in items:
            spec = self._parse_resource(title, body)
            if spec.identity in state.resources:
                raise ParseError(f"Duplicate ospf_vrf: {spec.identity}")
            state.resources[spec.identity] = spec

        return state

    def parse_yaml(self, text: str) -> DesiredState:
        """Parse a YAML manifest document."""
        try:
            config = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}") from e
        return self.parse(config or {})

    def _parse_resource(self, title: Any, body: Any) -> DesiredSpec:
        """Parse a single ospf_vrf entry."""
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ParseError(f"ospf_vrf {title!r} must be a mapping")

        identity = self._parse_identity(title or body.get("name"), body)

        ensure_str = str(body.get("ensure", "present")).lower()
        try:
            ensure = Ensure(ensure_str)
        except ValueError:
            raise ParseError(
                f"Invalid ensure for {identity}: {ensure_str}. "
                f"Must be 'present' or 'absent'"
            )

        properties = {}
        for name, value in body.items():
            if name in RESERVED_KEYS:
                continue
            if name not in PROPERTY_SPECS:
                raise ParseError(f"Unknown property for {identity}: {name}")
            properties[name] = self._parse_value(identity, name, value)

        return DesiredSpec(identity=identity, ensure=ensure, properties=properties)

    def _parse_identity(self, title: Any, body: dict) -> InstanceId:
        ospf = body.get("ospf")
        vrf = body.get("vrf")

        if ospf is not None and vrf is not None:
            # Explicit keys win; the title is then just a label
            return InstanceId(str(ospf), str(vrf))

        if not title:
            raise ParseError("ospf_vrf entry needs a title or both ospf and vrf")
        try:
            return InstanceId.from_title(title)
        except ValueError as e:
            raise ParseError(str(e)) from e

    def _parse_value(self, identity: InstanceId, name: str, value: Any) -> Any:
        """Coerce a manifest value to the property's type."""
        if isinstance(value, str) and value.strip().lower() == DEFAULT.value:
            return DEFAULT

        kind = PROPERTY_SPECS[name].kind
        if kind is int:
            if isinstance(value, bool):
                raise ParseError(f"{identity}: {name} must be an integer, got {value!r}")
            try:
                return int(value)
            except (TypeError, ValueError):
                raise ParseError(f"{identity}: {name} must be an integer, got {value!r}")

        if value is None:
            return ""
        return str(value)
