"""Logging configuration for the OSPF VRF reconciler.

Provides:
- Console output plus a rotating file log
- A separate performance log for discovery/apply timing
- Timing decorator and context manager for reconciliation phases

Environment Variables:
    OSPF_RECONCILER_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    OSPF_RECONCILER_LOG_FILE: Path to log file (default: ~/.ospf-reconciler/reconciler.log)
    OSPF_RECONCILER_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    OSPF_RECONCILER_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from ospf_reconciler.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("discover")
    async def discover_all(self):
        ...

    async with timed_section("apply", device_id="nexus-lab", resource="1 red"):
        ...
"""
import asyncio
import functools
import logging
import os
import time
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable, Any

# Separate from the package logger for easy filtering
perf_logger = logging.getLogger("ospf_reconciler.perf")

ENV_PREFIX = "OSPF_RECONCILER_"


def get_log_level() -> int:
    """Get log level from environment."""
    level_str = os.environ.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".ospf-reconciler" / "reconciler.log"
    path_str = os.environ.get(f"{ENV_PREFIX}LOG_FILE", str(default_path))
    return Path(path_str)


def setup_logging() -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (respects OSPF_RECONCILER_LOG_LEVEL)
    - File handler with rotation (DEBUG level, includes post-apply snapshots)
    - Performance file handler for phase timings
    """
    log_level = get_log_level()
    log_file = get_log_file()
    max_size_mb = int(os.environ.get(f"{ENV_PREFIX}LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get(f"{ENV_PREFIX}LOG_BACKUPS", "5"))

    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-35s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    perf_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | PERF | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(main_format)

    perf_log_file = log_file.parent / "reconciler-perf.log"
    perf_handler = RotatingFileHandler(
        perf_log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    perf_handler.setLevel(logging.DEBUG)
    perf_handler.setFormatter(perf_format)

    root_logger = logging.getLogger("ospf_reconciler")
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # Timings go to their own file only
    perf_logger.setLevel(logging.DEBUG)
    perf_logger.addHandler(perf_handler)
    perf_logger.propagate = False

    root_logger.info(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")
    perf_logger.info(f"Performance logging to: {perf_log_file}")


def _format_timing(
    operation: str,
    device_id: Optional[str],
    elapsed: float,
    outcome: str,
    extra: dict,
) -> str:
    msg = f"{operation:20s} | {device_id or 'N/A':15s} | {elapsed:8.2f}ms | {outcome}"
    if extra:
        msg += " | " + " | ".join(f"{k}={v}" for k, v in extra.items())
    return msg


def timed(operation: str, device_id: Optional[str] = None):
    """Decorator to log execution time of sync/async functions.

    Args:
        operation: Name of the operation (e.g., "discover", "create")
        device_id: Optional device identifier (falls back to self.device_id)
    """
    def decorator(func: Callable) -> Callable:
        def _device_id(args: tuple) -> Optional[str]:
            if device_id is None and args and hasattr(args[0], "device_id"):
                return args[0].device_id
            return device_id

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            dev_id = _device_id(args)
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.warning(_format_timing(operation, dev_id, elapsed, f"FAIL: {e}", {}))
                raise
            elapsed = (time.perf_counter() - start) * 1000
            perf_logger.info(_format_timing(operation, dev_id, elapsed, "OK", {}))
            return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            dev_id = _device_id(args)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.warning(_format_timing(operation, dev_id, elapsed, f"FAIL: {e}", {}))
                raise
            elapsed = (time.perf_counter() - start) * 1000
            perf_logger.info(_format_timing(operation, dev_id, elapsed, "OK", {}))
            return result

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


@asynccontextmanager
async def timed_section(operation: str, device_id: Optional[str] = None, **extra):
    """Async context manager for timing code sections.

    Usage:
        async with timed_section("apply", device_id="nexus-lab", resource="1 red"):
            await controller.apply(binding)
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        perf_logger.warning(_format_timing(operation, device_id, elapsed, f"FAIL: {e}", extra))
        raise
    elapsed = (time.perf_counter() - start) * 1000
    perf_logger.info(_format_timing(operation, device_id, elapsed, "OK", extra))
