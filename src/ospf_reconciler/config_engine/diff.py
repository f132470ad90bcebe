"""Change set calculation between desired and current state.

Computes the minimal set of property writes needed to reach the
desired state. Pure comparison, no device access.
"""
from typing import Any, Iterable, Optional

from .properties import get_spec
from .schema import DEFAULT, ChangeSet, DesiredSpec, InstanceId, ResourceRecord


def resolve_default(name: str, record: Optional[ResourceRecord]) -> Any:
    """
    Concrete value the default sentinel stands for.

    Device-computed defaults come from the record (already in canonical
    units). Without a record they cannot be known yet and the sentinel
    is returned unchanged.
    """
    spec = get_spec(name)
    if spec.device_default:
        if record is None or name not in record.defaults:
            return DEFAULT
        return record.defaults[name]
    return spec.default


class ChangeSetAccumulator:
    """Calculate which desired properties differ from current state."""

    def diff(
        self,
        desired: DesiredSpec,
        current: Optional[ResourceRecord]
    ) -> ChangeSet:
        """
        Calculate the change set for one instance.

        Args:
            desired: Declared properties (only these are considered)
            current: Discovered record, or None for a new instance

        Returns:
            ChangeSet holding only the properties that must be written
        """
        if current is None:
            # New instance: initialize everything that was declared
            changes = {
                name: resolve_default(name, None) if value is DEFAULT else value
                for name, value in desired.properties.items()
            }
            return ChangeSet(identity=desired.identity, changes=changes, initial=True)

        result = ChangeSet(identity=desired.identity)

        for name, value in desired.properties.items():
            if value is DEFAULT:
                value = resolve_default(name, current)
            if value != current.properties.get(name):
                result.changes[name] = value

        return result


def summarize_changes(
    changesets: Iterable[ChangeSet],
    removals: Iterable[InstanceId] = ()
) -> str:
    """
    Create a human-readable summary of pending changes.

    Useful for dry-run output and logging.
    """
    changesets = [c for c in changesets if c or c.initial]
    removals = list(removals)
    if not changesets and not removals:
        return "No changes needed - current state matches desired state"

    total = len(changesets) + len(removals)
    lines = [f"Changes to apply ({total} resource(s)):", ""]

    for identity in removals:
        lines.append(f"  [-] Remove ospf_vrf '{identity}'")

    for changeset in changesets:
        marker = "[+] Create" if changeset.initial else "[~] Modify"
        lines.append(f"  {marker} ospf_vrf '{changeset.identity}'")
        for name, value in changeset.changes.items():
            lines.append(f"      {name}: {value!r}")

    return "\n".join(lines)
