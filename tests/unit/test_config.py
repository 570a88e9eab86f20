"""Unit tests for configuration parsing, error types and logging helpers."""

import logging

import numpy as np
import pytest

import panda7.PANDA_ROBOT as PANDA_ROBOT
from panda7 import config as cfg
from panda7.utils.async_logging import AsyncLogHandler
from panda7.utils.errors import ConfigurationError, JointVectorError, Panda7Error


class TestEnvOverrides:
    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("PANDA7_TEST_VALUE", raising=False)
        assert cfg._env_float("PANDA7_TEST_VALUE", 1.5) == 1.5

    def test_blank_means_default(self, monkeypatch):
        monkeypatch.setenv("PANDA7_TEST_VALUE", "  ")
        assert cfg._env_float("PANDA7_TEST_VALUE", 2.0) == 2.0

    def test_parses_value(self, monkeypatch):
        monkeypatch.setenv("PANDA7_TEST_VALUE", "0.25")
        assert cfg._env_float("PANDA7_TEST_VALUE", 1.0) == 0.25

    def test_bad_value_raises(self, monkeypatch):
        monkeypatch.setenv("PANDA7_TEST_VALUE", "fast")
        with pytest.raises(ConfigurationError, match="PANDA7_TEST_VALUE"):
            cfg._env_float("PANDA7_TEST_VALUE", 1.0)


class TestDefaults:
    def test_resolver_tuning(self):
        assert cfg.RESOLVER.alpha == 1.0
        assert cfg.RESOLVER.beta == 0.05
        assert cfg.RESOLVER.q7_step == pytest.approx(0.1)
        assert cfg.RESOLVER.q7_window == pytest.approx(0.5)
        assert cfg.RESOLVER.q7_global_step == pytest.approx(0.2)

    def test_sequencer_timing(self):
        assert cfg.SEQUENCER.stack_multiplier == pytest.approx(0.8)
        assert cfg.SEQUENCER.tray_multiplier == pytest.approx(2.0)
        assert cfg.SEQUENCER.home_duration_s == pytest.approx(2.0)

    def test_stack_base_height(self):
        assert cfg.STACK_BASE_Z_M == pytest.approx(0.085)

    def test_robot_tables_are_read_only(self):
        with pytest.raises(ValueError):
            PANDA_ROBOT.joint.limits_rad[0, 0] = 0.0
        with pytest.raises(ValueError):
            cfg.HOME_POSITION_M[0] = 1.0

    def test_within_limits(self):
        assert PANDA_ROBOT.within_limits(PANDA_ROBOT.joint.neutral_rad)
        assert PANDA_ROBOT.within_limits(PANDA_ROBOT.joint.home_rad)
        assert not PANDA_ROBOT.within_limits(np.zeros(7))  # q4 = 0 is past its max


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(JointVectorError, Panda7Error)
        assert issubclass(JointVectorError, ValueError)
        assert issubclass(ConfigurationError, Panda7Error)
        assert issubclass(ConfigurationError, ValueError)


class TestLogging:
    def test_trace_level_registered(self):
        assert logging.getLevelName(cfg.TRACE) == "TRACE"
        assert hasattr(logging.getLogger("panda7"), "trace")

    def test_robot_summary_is_debug_only(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="panda7.PANDA_ROBOT"):
            PANDA_ROBOT.log_robot_summary()
        assert caplog.records
        assert all(r.levelno == logging.DEBUG for r in caplog.records)
        assert any("reach=" in r.getMessage() for r in caplog.records)


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []
        self.flushed = 0

    def emit(self, record):
        self.records.append(record)

    def flush(self):
        self.flushed += 1


@pytest.fixture
def quiet_logger():
    log = logging.getLogger("panda7.test_async")
    handler = ListHandler()
    log.handlers = [handler]
    log.propagate = False
    log.setLevel(logging.INFO)
    yield log, handler
    log.handlers = []
    log.propagate = True
    log.setLevel(logging.NOTSET)


class TestAsyncLogHandler:
    def test_queues_and_restores_own_handlers(self, quiet_logger):
        log, handler = quiet_logger
        with AsyncLogHandler(log) as async_log:
            assert async_log.started
            assert log.handlers != [handler]
            log.info("queued message")

        assert not async_log.started
        assert log.handlers == [handler]
        assert [r.getMessage() for r in handler.records] == ["queued message"]
        assert handler.flushed >= 1

    def test_explicit_handlers(self, quiet_logger):
        log, own = quiet_logger
        sink = ListHandler()
        with AsyncLogHandler(log, handlers=[sink]):
            log.info("to the sink")

        assert [r.getMessage() for r in sink.records] == ["to the sink"]
        assert own.records == []
        assert log.handlers == [own]

    def test_interrupt_still_flushes(self, quiet_logger):
        log, handler = quiet_logger
        with pytest.raises(KeyboardInterrupt):
            with AsyncLogHandler(log):
                log.warning("before interrupt")
                raise KeyboardInterrupt

        assert [r.getMessage() for r in handler.records] == ["before interrupt"]
        assert log.handlers == [handler]

    def test_nothing_to_route(self):
        log = logging.getLogger("panda7.test_async_empty")
        async_log = AsyncLogHandler(log, handlers=[])
        async_log.start()
        assert not async_log.started
        async_log.stop()
