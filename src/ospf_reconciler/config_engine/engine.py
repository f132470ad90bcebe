"""Main reconcile engine - orchestrates one full pass over a manifest.

Provides a single entry point for:
1. Parsing the desired state manifest
2. Validating property values
3. Discovering current instances and binding them to declared ones
4. Creating, destroying or updating each declared instance
5. Reporting per-resource outcomes
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..config.inventory import DeviceInventory
from ..devices.base import OSPFDevice
from ..utils.connection import with_retry
from .diff import summarize_changes
from .errors import ReconcileError, describe_error
from .executor import MutationExecutor
from .lifecycle import LifecycleController
from .parser import ManifestParser, ParseError
from .schema import (
    AuditEntry,
    Binding,
    ChangeType,
    DesiredState,
    Ensure,
    ExecuteOptions,
    ReconcileReport,
    ResourceResult,
    ValidationResult,
)
from .validator import ManifestValidator

logger = logging.getLogger(__name__)


class ReconcileEngine:
    """
    Reconcile declared OSPF VRF instances against a device.

    Usage:
        engine = ReconcileEngine(inventory)
        report = await engine.apply_manifest(manifest, dry_run=True)
    """

    def __init__(
        self,
        inventory: DeviceInventory,
        audit_log_path: Optional[str] = None,
        connect_attempts: int = 3,
        retry_min_wait: float = 1,
        retry_max_wait: float = 10,
    ):
        """
        Initialize the engine.

        Args:
            inventory: Device inventory for looking up devices
            audit_log_path: Path to audit log file (defaults to the inventory's)
            connect_attempts: Session setup attempts before giving up
            retry_min_wait: Minimum backoff between session attempts (seconds)
            retry_max_wait: Maximum backoff between session attempts (seconds)
        """
        self.inventory = inventory
        self.parser = ManifestParser()
        self.validator = ManifestValidator()
        self.executor = MutationExecutor(audit_log_path or inventory.audit_log_path)
        self._connect = with_retry(
            max_attempts=connect_attempts,
            min_wait=retry_min_wait,
            max_wait=retry_max_wait,
        )(self._open)

    async def _open(self, device: OSPFDevice) -> None:
        await device.connect()

    async def apply_manifest(
        self,
        config: dict[str, Any],
        dry_run: bool = False,
        audit_context: str = "",
        user: Optional[str] = None,
    ) -> ReconcileReport:
        """
        Converge a device to a desired state manifest.

        Args:
            config: Manifest dict (device + ospf_vrfs)
            dry_run: If True, compute changes without writing
            audit_context: Description for audit log
            user: User identifier for audit log

        Returns:
            ReconcileReport with one ResourceResult per declared resource
        """
        try:
            desired = self.parser.parse(config)
        except ParseError as e:
            device_id = config.get("device", "") if isinstance(config, dict) else ""
            report = ReconcileReport(device_id=str(device_id), dry_run=dry_run)
            report.error = f"Parse error: {e}"
            return report

        options = ExecuteOptions(dry_run=dry_run, audit_context=audit_context, user=user)
        return await self.reconcile(desired, options)

    async def reconcile(
        self,
        desired: DesiredState,
        options: Optional[ExecuteOptions] = None
    ) -> ReconcileReport:
        """Run one reconciliation pass for an already parsed DesiredState."""
        options = options or ExecuteOptions()
        report = ReconcileReport(device_id=desired.device_id, dry_run=options.dry_run)

        logger.info(f"Validating manifest for device {desired.device_id}")
        validation = self.validator.validate(desired)
        for warning in validation.warnings:
            logger.warning(warning)
        if not validation.valid:
            report.error = f"Validation failed: {'; '.join(validation.errors)}"
            return report

        try:
            device = self.inventory.get_device(desired.device_id)
        except (KeyError, ValueError) as e:
            report.error = str(e)
            return report

        try:
            await self._connect(device)
        except Exception as e:
            report.error = f"Failed to connect to {desired.device_id}: {e}"
            return report

        try:
            controller = LifecycleController(device, self.executor)
            try:
                await controller.list_managed_resources()
            except Exception as e:
                report.error = f"Discovery failed on {desired.device_id}: {describe_error(e)}"
                logger.error(report.error)
                return report
            report.discovery_errors = [str(e) for e in controller.discovery.errors]
            bindings = controller.prefetch(desired.resources.values())

            for binding in bindings.values():
                result = await self._reconcile_one(controller, binding, options)
                report.results.append(result)
                if not options.dry_run and result.action != ChangeType.NO_CHANGE:
                    self._audit(device, result, options)
        finally:
            await device.disconnect()

        logger.info(
            f"{'DRY RUN: ' if options.dry_run else ''}Reconciled "
            f"{len(report.results)} resource(s) on {desired.device_id}, "
            f"{len(report.failed)} failed"
        )
        return report

    async def _reconcile_one(
        self,
        controller: LifecycleController,
        binding: Binding,
        options: ExecuteOptions
    ) -> ResourceResult:
        """Drive the lifecycle hooks for one binding, isolating failures."""
        resource = binding.identity.title
        action = ChangeType.NO_CHANGE

        try:
            if binding.desired.ensure == Ensure.ABSENT:
                if not controller.exists(binding):
                    return ResourceResult(resource=resource, success=True, dry_run=options.dry_run)
                action = ChangeType.DELETE
                controller.request_destroy(binding)
                if options.dry_run:
                    return ResourceResult(resource=resource, action=action, success=True, dry_run=True)

            elif not controller.exists(binding):
                action = ChangeType.CREATE
                controller.request_create(binding)
                if options.dry_run:
                    _, calls = controller.plan_create(binding)
                    return ResourceResult(
                        resource=resource,
                        action=action,
                        success=True,
                        dry_run=True,
                        calls=calls,
                    )

            elif options.dry_run:
                changeset, calls = controller.plan(binding)
                return ResourceResult(
                    resource=resource,
                    action=ChangeType.MODIFY if changeset else ChangeType.NO_CHANGE,
                    success=True,
                    dry_run=True,
                    calls=calls,
                )

            else:
                action = ChangeType.MODIFY

            return await controller.apply(binding)

        except ReconcileError as e:
            logger.error(f"{resource}: {type(e).__name__}: {e.message}")
            return ResourceResult(
                resource=resource,
                action=action,
                success=False,
                dry_run=options.dry_run,
                error=str(e),
                error_type=type(e).__name__,
            )

    def _audit(self, device: OSPFDevice, result: ResourceResult, options: ExecuteOptions) -> None:
        self.executor.write_audit(AuditEntry(
            timestamp=datetime.now(timezone.utc),
            device_id=device.device_id,
            resource=result.resource,
            operation=result.action.value,
            context=options.audit_context,
            user=options.user or "system",
            success=result.success,
            changes=[call.describe() for call in result.calls],
            error=result.error,
        ))

    def parse(self, config: dict[str, Any]) -> DesiredState:
        """Parse a manifest dict to DesiredState (for external use)."""
        return self.parser.parse(config)

    def validate(self, desired: DesiredState) -> ValidationResult:
        """Validate a DesiredState (for external use)."""
        return self.validator.validate(desired)

    async def preview(self, config: dict[str, Any]) -> str:
        """
        Preview changes without applying.

        Returns human-readable summary.
        """
        desired = self.parser.parse(config)
        validation = self.validator.validate(desired)
        if not validation.valid:
            return "Validation failed:\n" + "\n".join(validation.errors)

        device = self.inventory.get_device(desired.device_id)
        await self._connect(device)
        try:
            controller = LifecycleController(device, self.executor)
            await controller.list_managed_resources()
            bindings = controller.prefetch(desired.resources.values())
        finally:
            await device.disconnect()

        changesets = []
        removals = []
        for binding in bindings.values():
            if binding.desired.ensure == Ensure.ABSENT:
                if controller.exists(binding):
                    removals.append(binding.identity)
            else:
                changesets.append(controller.pending_changes(binding))

        summary = summarize_changes(changesets, removals)

        if validation.warnings:
            summary += "\n\nWarnings:\n" + "\n".join(
                f"  - {w}" for w in validation.warnings
            )

        return summary
