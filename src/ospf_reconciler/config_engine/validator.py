"""Pre-flight validation for desired state manifests.

Catches out-of-range values before any device communication.
"""
import ipaddress

from .properties import PROPERTY_SPECS
from .schema import DEFAULT, DesiredSpec, DesiredState, Ensure, ValidationResult


class ManifestValidator:
    """Validate desired state for value-domain errors before execution."""

    def validate(self, desired: DesiredState) -> ValidationResult:
        """
        Validate a desired state.

        Performs pre-flight checks:
        - Integer ranges and enumerated choices
        - Router ID format
        - Specs that would be refused or ignored (warnings)

        Returns:
            ValidationResult with valid flag, errors, and warnings
        """
        errors: list[str] = []
        warnings: list[str] = []

        for spec in desired.resources.values():
            self._validate_values(spec, errors)
            self._check_intent(spec, warnings)

        return ValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def _validate_values(self, spec: DesiredSpec, errors: list[str]) -> None:
        for name, value in spec.properties.items():
            if value is DEFAULT:
                continue
            prop = PROPERTY_SPECS[name]

            if prop.choices is not None and value not in prop.choices:
                errors.append(
                    f"{spec.identity}: invalid {name} '{value}'. "
                    f"Valid: {', '.join(sorted(prop.choices))}"
                )

            if prop.kind is int:
                if prop.minimum is not None and value < prop.minimum:
                    errors.append(
                        f"{spec.identity}: {name} {value} below minimum {prop.minimum}"
                    )
                if prop.maximum is not None and value > prop.maximum:
                    errors.append(
                        f"{spec.identity}: {name} {value} above maximum {prop.maximum}"
                    )

        router_id = spec.properties.get("router_id")
        if router_id and router_id is not DEFAULT:
            try:
                ipaddress.IPv4Address(router_id)
            except ValueError:
                errors.append(f"{spec.identity}: router_id '{router_id}' is not an IPv4 address")

    def _check_intent(self, spec: DesiredSpec, warnings: list[str]) -> None:
        if spec.ensure == Ensure.ABSENT:
            if spec.identity.is_protected:
                warnings.append(
                    f"{spec.identity}: VRF default cannot be removed and will be refused"
                )
            if spec.properties:
                warnings.append(
                    f"{spec.identity}: properties are ignored for an absent resource"
                )
        elif not spec.properties:
            warnings.append(f"{spec.identity}: no properties declared")
