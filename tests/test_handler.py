from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest
from conftest import FakeBackend
from injector import Binder, Module

import skygate.__main__ as main_module
import skygate.handler as handler_module
from skygate.config import ENV_VARS
from skygate.constants import InstanceState
from skygate.handler import MSG_FAILED, MSG_LAUNCHED, MSG_SKIPPED, evaluate, handler, to_response
from skygate.providers.protocol import ProvisioningBackend
from skygate.types import Failed, Launched, LaunchResult, Skipped

pytestmark = [pytest.mark.unit]

CONFIG_TOML = """\
[gate]
bucket = "scraper-artifacts"
image_id = "ami-03f4878755434977f"
key_name = "scraper-key"
security_group_ids = "sg-1"
instance_profile = "scraper-profile"
"""


class _FakeBackendModule(Module):
    def __init__(self, backend: FakeBackend) -> None:
        self._backend = backend

    def configure(self, binder: Binder) -> None:
        binder.bind(ProvisioningBackend, to=self._backend)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "skygate.toml"
    path.write_text(CONFIG_TOML)
    return path


class TestToResponse:
    def test_skipped(self):
        response = to_response(Skipped(active=("i-1",)))
        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == {"message": MSG_SKIPPED}

    def test_launched(self):
        response = to_response(Launched(instance_id="i-123"))
        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == {"message": MSG_LAUNCHED, "instanceId": "i-123"}

    def test_failed(self):
        response = to_response(Failed(reason="boom", stage="launch"))
        assert response["statusCode"] == 500
        assert json.loads(response["body"]) == {"message": MSG_FAILED, "error": "boom"}


class TestEvaluate:
    @pytest.mark.asyncio
    async def test_launches_through_injected_backend(self, config_path: Path):
        backend = FakeBackend()
        backend.next_id = "i-injected"

        result = await evaluate(
            "design-hackathon-scraper",
            config_path=config_path,
            modules=[_FakeBackendModule(backend)],
        )

        assert result == Launched(instance_id="i-injected")
        (spec,) = backend.created
        assert spec.tag("Name") == "design-hackathon-scraper"

    @pytest.mark.asyncio
    async def test_skips_default_workload(self, config_path: Path):
        backend = FakeBackend()
        backend.add("i-live", InstanceState.RUNNING, workload="design-hackathon-scraper")

        result = await evaluate(config_path=config_path, modules=[_FakeBackendModule(backend)])

        assert result == Skipped(active=("i-live",))

    @pytest.mark.asyncio
    async def test_environment_overrides_file(
        self, config_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("S3_BUCKET", "env-bucket")
        backend = FakeBackend()

        await evaluate(config_path=config_path, modules=[_FakeBackendModule(backend)])

        (spec,) = backend.created
        assert "s3://env-bucket/" in base64.b64decode(spec.user_data).decode()

    @pytest.mark.asyncio
    async def test_invalid_file_fails_without_backend(self, tmp_path: Path):
        bad = tmp_path / "bad.toml"
        bad.write_text("[gate\n")
        backend = FakeBackend()

        result = await evaluate(config_path=bad, modules=[_FakeBackendModule(backend)])

        assert isinstance(result, Failed)
        assert result.stage == "config"
        assert backend.calls == 0

    @pytest.mark.asyncio
    async def test_payload_named_after_workload(self, config_path: Path):
        backend = FakeBackend()

        await evaluate("indexer", config_path=config_path, modules=[_FakeBackendModule(backend)])

        (spec,) = backend.created
        script = base64.b64decode(spec.user_data).decode()
        assert "s3://scraper-artifacts/indexer.zip" in script
        assert "systemctl start indexer" in script
        assert "design-hackathon-scraper" not in script


class TestHandler:
    def test_missing_configuration_returns_500(self):
        response = handler({}, None)

        assert response["statusCode"] == 500
        body = json.loads(response["body"])
        assert body["message"] == MSG_FAILED
        assert "security group" in body["error"]

    def test_wrongly_typed_config_file_returns_500(self, tmp_path: Path):
        (tmp_path / "skygate.toml").write_text("[gate]\nsecurity_group_ids = 5\n")

        response = handler({}, None)

        assert response["statusCode"] == 500
        assert "security_group_ids" in json.loads(response["body"])["error"]

    def test_returns_launch_envelope(self, monkeypatch: pytest.MonkeyPatch):
        async def fake_evaluate() -> LaunchResult:
            return Launched(instance_id="i-123")

        monkeypatch.setattr(handler_module, "evaluate", fake_evaluate)

        response = handler({"source": "aws.events"}, None)

        assert response == {
            "statusCode": 200,
            "body": json.dumps({"message": MSG_LAUNCHED, "instanceId": "i-123"}),
        }


class TestCli:
    def test_exit_code_zero_on_skip(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ):
        seen: dict[str, object] = {}

        async def fake_evaluate(workload: str, *, config_path: Path | None = None) -> LaunchResult:
            seen.update(workload=workload, config_path=config_path)
            return Skipped(active=("i-1",))

        monkeypatch.setattr(main_module, "evaluate", fake_evaluate)

        code = main_module.cli(["--workload", "indexer", "--config", "x.toml"])

        assert code == 0
        assert seen == {"workload": "indexer", "config_path": Path("x.toml")}
        assert MSG_SKIPPED in capsys.readouterr().out

    def test_exit_code_one_on_failure(self, monkeypatch: pytest.MonkeyPatch):
        async def fake_evaluate(workload: str, *, config_path: Path | None = None) -> LaunchResult:
            return Failed(reason="nope", stage="query")

        monkeypatch.setattr(main_module, "evaluate", fake_evaluate)

        assert main_module.cli([]) == 1

    def test_log_file_receives_gate_records(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config_path: Path
    ):
        backend = FakeBackend()
        backend.add("i-live", InstanceState.RUNNING, workload="indexer")

        async def wired_evaluate(workload: str, *, config_path: Path | None = None) -> LaunchResult:
            return await evaluate(
                workload, config_path=config_path, modules=[_FakeBackendModule(backend)]
            )

        monkeypatch.setattr(main_module, "evaluate", wired_evaluate)
        log_file = tmp_path / "gate.log"

        code = main_module.cli([
            "--workload", "indexer",
            "--config", str(config_path),
            "--log-level", "DEBUG",
            "--log-file", str(log_file),
        ])

        assert code == 0
        text = log_file.read_text()
        assert "Querying active instances for indexer" in text
        assert "already active" in text
