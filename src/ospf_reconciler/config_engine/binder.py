"""Pair desired specs with discovered instances."""
import logging
from typing import Iterable

from .schema import Binding, DesiredSpec, InstanceId, LifecycleState, ResourceRecord

logger = logging.getLogger(__name__)


class DesiredStateBinder:
    """Match desired specs to discovered records by exact identity."""

    def bind(
        self,
        desired: Iterable[DesiredSpec],
        discovered: Iterable[ResourceRecord],
    ) -> dict[InstanceId, Binding]:
        """
        Bind each desired spec to its discovered record.

        Desired specs with no match get current=None (create candidates).
        Discovered records nobody declared are not returned at all.
        """
        found = {record.identity: record for record in discovered}
        bindings: dict[InstanceId, Binding] = {}

        for spec in desired:
            if spec.identity in bindings:
                raise ValueError(f"Duplicate desired resource: {spec.identity}")
            current = found.pop(spec.identity, None)
            bindings[spec.identity] = Binding(
                desired=spec,
                current=current,
                state=LifecycleState.PRESENT_CLEAN if current else LifecycleState.ABSENT,
            )

        if found:
            logger.debug(
                "Leaving undeclared instance(s) untouched: "
                + ", ".join(str(identity) for identity in sorted(found))
            )

        return bindings
