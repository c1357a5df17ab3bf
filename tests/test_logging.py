from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from conftest import FakeBackend

from skygate.config import GateConfig
from skygate.constants import InstanceState
from skygate.exceptions import QueryError
from skygate.gate import ProvisioningGate
from skygate.logging import LogConfig, setup_logging, teardown_logging

pytestmark = [pytest.mark.unit]


def _run(backend: FakeBackend, config: GateConfig) -> None:
    asyncio.run(ProvisioningGate(backend).evaluate_and_launch("scraper", config))


class TestLogging:
    def test_file_sink_captures_gate_decisions(
        self, tmp_path: Path, backend: FakeBackend, config: GateConfig
    ) -> None:
        log_file = tmp_path / "logs" / "skygate.log"
        backend.add("i-live", InstanceState.RUNNING)

        ids = setup_logging(LogConfig(console=False, file=log_file))
        try:
            _run(backend, config)
        finally:
            teardown_logging(ids)

        text = log_file.read_text()
        assert "already active" in text
        assert "i-live" in text
        assert "[gate]" in text

    def test_stderr_respects_level(
        self, backend: FakeBackend, config: GateConfig, capsys: pytest.CaptureFixture[str]
    ) -> None:
        backend.list_error = QueryError("RequestLimitExceeded: slow down")

        ids = setup_logging(LogConfig(level="WARNING"))
        try:
            _run(backend, config)
        finally:
            teardown_logging(ids)

        err = capsys.readouterr().err
        assert "Querying active instances" not in err
        assert err.count("Gate failed during query") == 1

    def test_stderr_silent_below_level_on_launch(
        self, backend: FakeBackend, config: GateConfig, capsys: pytest.CaptureFixture[str]
    ) -> None:
        ids = setup_logging(LogConfig(level="ERROR"))
        try:
            _run(backend, config)
        finally:
            teardown_logging(ids)

        assert backend.created
        assert capsys.readouterr().err == ""

    def test_teardown_removes_handlers(
        self, tmp_path: Path, backend: FakeBackend, config: GateConfig
    ) -> None:
        log_file = tmp_path / "skygate.log"
        ids = setup_logging(LogConfig(console=False, file=log_file))
        teardown_logging(ids)

        _run(backend, config)

        assert "Launched" not in log_file.read_text()
