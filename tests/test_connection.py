"""Tests for connection retry utilities."""
import pytest

from ospf_reconciler.devices.base import DeviceError
from ospf_reconciler.utils.connection import with_retry, RETRYABLE_EXCEPTIONS


class TestWithRetry:
    """Tests for retry decorator."""

    @pytest.mark.asyncio
    async def test_async_success_no_retry(self):
        """Successful async function doesn't retry."""
        call_count = 0

        @with_retry(max_attempts=3)
        async def succeeding_func():
            nonlocal call_count
            call_count += 1
            return "success"

        result = await succeeding_func()
        assert result == "success"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_async_retry_then_success(self):
        """Async function retries on failure then succeeds."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        async def failing_then_succeeding():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise ConnectionRefusedError("Connection refused")
            return "success"

        result = await failing_then_succeeding()
        assert result == "success"
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_async_max_retries_exceeded(self):
        """Async function raises after max retries."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        async def always_failing():
            nonlocal call_count
            call_count += 1
            raise TimeoutError("Always times out")

        with pytest.raises(TimeoutError):
            await always_failing()
        assert call_count == 3

    def test_sync_success_no_retry(self):
        """Successful sync function doesn't retry."""
        call_count = 0

        @with_retry(max_attempts=3)
        def succeeding_func():
            nonlocal call_count
            call_count += 1
            return "success"

        assert succeeding_func() == "success"
        assert call_count == 1

    def test_sync_retry_then_success(self):
        """Sync function retries on connection reset."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        def flaky():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ConnectionResetError("reset")
            return call_count

        assert flaky() == 3

    @pytest.mark.asyncio
    async def test_device_error_not_retried(self):
        """Rejected writes surface immediately."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        async def rejected_write():
            nonlocal call_count
            call_count += 1
            raise DeviceError("Write rejected")

        with pytest.raises(DeviceError):
            await rejected_write()
        assert call_count == 1


class TestRetryableExceptions:
    """Tests for the retryable exception set."""

    def test_session_errors_included(self):
        assert ConnectionRefusedError in RETRYABLE_EXCEPTIONS
        assert ConnectionResetError in RETRYABLE_EXCEPTIONS
        assert TimeoutError in RETRYABLE_EXCEPTIONS
        assert EOFError in RETRYABLE_EXCEPTIONS

    def test_device_error_excluded(self):
        assert DeviceError not in RETRYABLE_EXCEPTIONS
