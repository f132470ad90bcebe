"""Lifecycle controller - the per-resource hooks a catalog framework calls.

The framework lists managed resources once, binds its declared resources
to them, then for each one asks exists?, requests create or destroy as
needed, and finally calls apply.
"""
import logging
from typing import Iterable, Optional

from ..devices.base import OSPFDevice
from ..utils.logging_config import timed_section
from .binder import DesiredStateBinder
from .diff import ChangeSetAccumulator
from .discovery import InstanceDiscovery
from .errors import MutationError, PolicyViolation, UnitConversionError, describe_error
from .executor import MutationExecutor
from .planner import GroupedMutationPlanner
from .properties import PROPERTY_SPECS
from .schema import (
    Binding,
    ChangeSet,
    ChangeType,
    DesiredSpec,
    Ensure,
    InstanceId,
    LifecycleState,
    MutationCall,
    ResourceRecord,
    ResourceResult,
)

logger = logging.getLogger(__name__)


class LifecycleController:
    """Drive create/destroy/update of OSPF VRF instances on one device."""

    def __init__(
        self,
        device: OSPFDevice,
        executor: Optional[MutationExecutor] = None
    ):
        self.device = device
        self.discovery = InstanceDiscovery(device)
        self.binder = DesiredStateBinder()
        self.accumulator = ChangeSetAccumulator()
        self.planner = GroupedMutationPlanner()
        self.executor = executor or MutationExecutor()
        self._snapshot: list[ResourceRecord] = []

    # --- Discovery / binding ---

    async def list_managed_resources(self) -> list[ResourceRecord]:
        """Discover every readable instance on the device."""
        self._snapshot = await self.discovery.discover_all()
        return list(self._snapshot)

    def prefetch(self, desired: Iterable[DesiredSpec]) -> dict[InstanceId, Binding]:
        """Bind desired specs against the last discovery snapshot."""
        return self.binder.bind(desired, self._snapshot)

    # --- Hooks ---

    def exists(self, binding: Binding) -> bool:
        return (
            binding.current is not None
            and binding.current.ensure == Ensure.PRESENT
            and binding.state != LifecycleState.DESTROYED
        )

    def request_create(self, binding: Binding) -> None:
        binding.intent = Ensure.PRESENT

    def request_destroy(self, binding: Binding) -> None:
        """
        Mark an instance for removal.

        Raises:
            PolicyViolation: For the default VRF, which only goes away
                together with its whole OSPF process
        """
        self._check_removable(binding)
        binding.intent = Ensure.ABSENT

    def pending_changes(self, binding: Binding) -> ChangeSet:
        """Change set for the binding against its discovered state."""
        changeset = self.accumulator.diff(binding.desired, binding.current)
        if binding.current is not None and changeset:
            binding.state = LifecycleState.PRESENT_DIRTY
        return changeset

    def plan(self, binding: Binding) -> tuple[ChangeSet, list[MutationCall]]:
        """Change set and device calls for an existing instance."""
        changeset = self.pending_changes(binding)
        return changeset, self.planner.plan(changeset, binding.current)

    def plan_create(self, binding: Binding) -> tuple[ChangeSet, list[MutationCall]]:
        """
        Change set and device calls a create would issue after construction.

        Planned against factory defaults. Device-computed defaults are not
        known until the instance exists, so they stay as DEFAULT.
        """
        changeset = self.accumulator.diff(binding.desired, None)
        return changeset, self.planner.plan(changeset, None, allow_unresolved=True)

    async def apply(self, binding: Binding) -> ResourceResult:
        """
        Flush pending intent and property changes to the device.

        Raises:
            PolicyViolation: Destroy requested for the default VRF
            MutationError: A device write, create or destroy failed
            UnitConversionError: The device reported an unknown cost unit
        """
        resource = binding.identity.title

        async with timed_section("apply", device_id=self.device.device_id, resource=resource):
            if binding.intent == Ensure.ABSENT:
                return await self._destroy(binding)

            if binding.current is None:
                action = ChangeType.CREATE
                handle = await self.executor.create(self.device, binding.identity)
                binding.state = LifecycleState.PRESENT_DIRTY
                baseline = await self._read(binding.identity, handle)
                changeset = self.accumulator.diff(binding.desired, None)
            else:
                baseline = binding.current
                handle = baseline.handle
                changeset = self.pending_changes(binding)
                action = ChangeType.MODIFY if changeset else ChangeType.NO_CHANGE

            calls = self.planner.plan(changeset, baseline)
            applied = await self.executor.execute(self.device, handle, calls, resource)
            binding.state = LifecycleState.PRESENT_CLEAN

        if applied:
            logger.info(f"{resource}: applied {len(applied)} call(s)")
        await self._log_snapshot(binding.identity, handle)

        return ResourceResult(resource=resource, action=action, success=True, calls=applied)

    def _check_removable(self, binding: Binding) -> None:
        if binding.identity.is_protected:
            raise PolicyViolation(
                "VRF default cannot be removed by ospf_vrf. Remove the entire "
                "OSPF process to remove the default VRF.",
                resource=binding.identity.title,
            )

    async def _destroy(self, binding: Binding) -> ResourceResult:
        self._check_removable(binding)
        if binding.current is not None:
            await self.executor.destroy(self.device, binding.identity, binding.current.handle)
        binding.state = LifecycleState.DESTROYED
        logger.info(f"Vrf={binding.identity.title} is absent.")
        return ResourceResult(
            resource=binding.identity.title,
            action=ChangeType.DELETE,
            success=True,
        )

    async def _read(self, identity: InstanceId, handle) -> ResourceRecord:
        try:
            return await self.discovery.read_instance(identity, handle)
        except UnitConversionError as e:
            raise UnitConversionError(e.message, resource=identity.title) from e
        except Exception as e:
            raise MutationError(f"read after create failed: {describe_error(e)}", resource=identity.title) from e

    async def _log_snapshot(self, identity: InstanceId, handle) -> None:
        """Dump the instance's current properties at DEBUG level."""
        try:
            record = await self.discovery.read_instance(identity, handle)
        except Exception as e:
            logger.warning(f"{identity}: could not re-read after apply: {describe_error(e)}")
            return

        current = "\n%30s: %s" % ("vrf", identity.title)
        for name in PROPERTY_SPECS:
            current += "\n%30s: %s" % (name, record.properties.get(name))
        logger.debug(current)
