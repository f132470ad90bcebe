"""Mutation planner for turning a change set into device calls.

Properties outside a group become one call each. A group becomes a
single call carrying every member, because the device only accepts the
three throttle timers together.
"""
import logging
from typing import Optional

from .diff import resolve_default
from .properties import PROPERTY_GROUPS, PROPERTY_SPECS
from .schema import DEFAULT, ChangeSet, MutationCall, MutationKind, ResourceRecord
from .units import CANONICAL_UNIT

logger = logging.getLogger(__name__)


class GroupedMutationPlanner:
    """Generate the device calls for a change set."""

    def plan(
        self,
        changeset: ChangeSet,
        current: Optional[ResourceRecord],
        allow_unresolved: bool = False,
    ) -> list[MutationCall]:
        """
        Generate mutation calls from a change set.

        Args:
            changeset: Pending values for one instance
            current: Pre-change record used to fill unchanged group
                members and device defaults. None means factory defaults.
            allow_unresolved: Leave a device default as DEFAULT when it
                cannot be read yet (previewing a create)

        Returns:
            List of MutationCall in apply order
        """
        calls: list[MutationCall] = []

        for name, spec in PROPERTY_SPECS.items():
            if spec.group or name not in changeset:
                continue
            value = self._concrete(name, changeset.get(name), current, allow_unresolved)
            if spec.derived:
                calls.append(MutationCall(
                    MutationKind.COST, name, (value, CANONICAL_UNIT.value)
                ))
            else:
                calls.append(MutationCall(MutationKind.PROPERTY, name, (value,)))

        for group, members in PROPERTY_GROUPS.items():
            call = self._group_call(group, members, changeset, current)
            if call:
                calls.append(call)

        logger.debug(
            f"{changeset.identity}: planned {len(calls)} call(s) "
            f"for {len(changeset)} changed propert{'y' if len(changeset) == 1 else 'ies'}"
        )
        return calls

    def _group_call(
        self,
        group: str,
        members: tuple[str, ...],
        changeset: ChangeSet,
        current: Optional[ResourceRecord]
    ) -> Optional[MutationCall]:
        """Build the combined call for a group, or None if untouched."""
        if not any(member in changeset for member in members):
            return None

        values = []
        for member in members:
            if member in changeset:
                values.append(self._concrete(member, changeset.get(member), current))
            elif current is not None:
                values.append(current.properties[member])
            else:
                values.append(PROPERTY_SPECS[member].default)

        return MutationCall(MutationKind.GROUP, group, tuple(values))

    def _concrete(
        self,
        name: str,
        value,
        current: Optional[ResourceRecord],
        allow_unresolved: bool = False
    ):
        if value is DEFAULT:
            value = resolve_default(name, current)
        if value is DEFAULT and not allow_unresolved:
            raise ValueError(f"Device default for {name} is unknown without a current record")
        return value
