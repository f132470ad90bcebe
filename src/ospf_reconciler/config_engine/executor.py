"""Executor for issuing planned mutations to a device.

Calls are issued in order and stop at the first failure. Nothing is
retried; the failure is reported and the resource is left unconverged.
"""
import json
import logging
from pathlib import Path
from typing import Optional

from ..devices.base import InstanceHandle, OSPFDevice
from .errors import MutationError, describe_error
from .schema import AuditEntry, InstanceId, MutationCall, MutationKind

logger = logging.getLogger(__name__)


class MutationExecutor:
    """Execute mutation calls on a device."""

    def __init__(self, audit_log_path: Optional[str] = None):
        """
        Initialize executor.

        Args:
            audit_log_path: Path to JSON-lines audit log (optional)
        """
        self.audit_log_path = audit_log_path

    async def execute(
        self,
        device: OSPFDevice,
        handle: InstanceHandle,
        calls: list[MutationCall],
        resource: str = "",
    ) -> list[MutationCall]:
        """
        Issue each call against the instance.

        Returns:
            The calls that were applied

        Raises:
            MutationError: On the first call the device rejects
        """
        applied: list[MutationCall] = []

        for call in calls:
            logger.debug(f"{resource}: {call.describe()}")
            try:
                await self._dispatch(device, handle, call)
            except Exception as e:
                raise MutationError(
                    f"{call.describe()} failed after {len(applied)} of "
                    f"{len(calls)} call(s): {describe_error(e)}",
                    resource=resource,
                ) from e
            applied.append(call)

        return applied

    async def _dispatch(
        self,
        device: OSPFDevice,
        handle: InstanceHandle,
        call: MutationCall
    ) -> None:
        if call.kind == MutationKind.PROPERTY:
            await device.write_property(handle, call.target, call.values[0])
        elif call.kind == MutationKind.COST:
            value, unit = call.values
            await device.write_cost(handle, value, unit)
        elif call.kind == MutationKind.GROUP:
            await device.write_grouped_timers(handle, call.target, *call.values)
        else:
            raise ValueError(f"Unsupported mutation kind: {call.kind}")

    async def create(self, device: OSPFDevice, identity: InstanceId) -> InstanceHandle:
        """Construct a new instance on the device."""
        try:
            return await device.create_instance(identity.process_id, identity.vrf_name)
        except Exception as e:
            raise MutationError(f"create failed: {describe_error(e)}", resource=identity.title) from e

    async def destroy(self, device: OSPFDevice, identity: InstanceId, handle: InstanceHandle) -> None:
        """Remove an instance from the device."""
        try:
            await device.destroy_instance(handle)
        except Exception as e:
            raise MutationError(f"destroy failed: {describe_error(e)}", resource=identity.title) from e

    def write_audit(self, entry: AuditEntry) -> None:
        """Append an audit entry to the log file."""
        if not self.audit_log_path:
            return

        try:
            log_path = Path(self.audit_log_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            log_entry = {
                "timestamp": entry.timestamp.isoformat(),
                "device_id": entry.device_id,
                "resource": entry.resource,
                "operation": entry.operation,
                "context": entry.context,
                "user": entry.user,
                "success": entry.success,
                "changes": entry.changes,
                "error": entry.error,
            }

            with open(log_path, "a") as f:
                f.write(json.dumps(log_entry) + "\n")

        except OSError as e:
            logger.warning(f"Failed to write audit log: {e}")
