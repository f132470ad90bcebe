"""Tests for logging setup and phase timing."""
import logging

import pytest

from ospf_reconciler.utils.logging_config import (
    get_log_file,
    get_log_level,
    perf_logger,
    setup_logging,
    timed,
    timed_section,
)


@pytest.fixture
def perf_records(caplog):
    """Capture perf records even though the perf logger does not propagate."""
    perf_logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger=perf_logger.name)
    yield caplog
    perf_logger.removeHandler(caplog.handler)


class TestEnvironment:
    """Tests for environment-driven settings."""

    def test_log_level(self, monkeypatch):
        monkeypatch.setenv("OSPF_RECONCILER_LOG_LEVEL", "debug")
        assert get_log_level() == logging.DEBUG

    def test_log_level_unknown_falls_back(self, monkeypatch):
        monkeypatch.setenv("OSPF_RECONCILER_LOG_LEVEL", "chatty")
        assert get_log_level() == logging.INFO

    def test_log_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OSPF_RECONCILER_LOG_FILE", str(tmp_path / "x.log"))
        assert get_log_file() == tmp_path / "x.log"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_creates_log_files(self, monkeypatch, tmp_path):
        log_file = tmp_path / "logs" / "reconciler.log"
        monkeypatch.setenv("OSPF_RECONCILER_LOG_FILE", str(log_file))
        package_logger = logging.getLogger("ospf_reconciler")
        handlers = list(package_logger.handlers)
        perf_handlers = list(perf_logger.handlers)
        level = package_logger.level

        try:
            setup_logging()
            logging.getLogger("ospf_reconciler.test").debug("hello file")
            for handler in package_logger.handlers + perf_logger.handlers:
                handler.flush()

            assert "hello file" in log_file.read_text()
            assert (tmp_path / "logs" / "reconciler-perf.log").exists()
        finally:
            for handler in package_logger.handlers[len(handlers):]:
                handler.close()
                package_logger.removeHandler(handler)
            for handler in perf_logger.handlers[len(perf_handlers):]:
                handler.close()
                perf_logger.removeHandler(handler)
            package_logger.setLevel(level)
            perf_logger.propagate = True


class TestTimed:
    """Tests for the timing helpers."""

    @pytest.mark.asyncio
    async def test_async_decorator_uses_device_id(self, perf_records):
        class Worker:
            device_id = "nexus-lab"

            @timed("discover")
            async def run(self):
                return 3

        assert await Worker().run() == 3
        assert "discover" in perf_records.text
        assert "nexus-lab" in perf_records.text
        assert "OK" in perf_records.text

    def test_sync_failure_logged_and_raised(self, perf_records):
        @timed("parse", device_id="lab")
        def broken():
            raise ValueError("bad manifest")

        with pytest.raises(ValueError):
            broken()
        assert "FAIL: bad manifest" in perf_records.text

    @pytest.mark.asyncio
    async def test_section_extra_fields(self, perf_records):
        async with timed_section("apply", device_id="lab", resource="1 red"):
            pass
        assert "resource=1 red" in perf_records.text
