"""Trigger surface: one evaluation per invocation.

``handler`` follows the serverless handler convention, so the same module
can back a scheduled rule, an HTTP route or a queue subscription. The event
body is ignored; everything comes from configuration.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Final, TypedDict

from injector import Injector, Module

from skygate.bootstrap.worker import worker_bootstrap
from skygate.config import load_config
from skygate.constants import DEFAULT_WORKLOAD
from skygate.exceptions import ConfigurationError
from skygate.gate import ProvisioningGate
from skygate.logging import LogConfig, setup_logging, teardown_logging
from skygate.module import GateModule
from skygate.providers.aws.clients import AWSModule
from skygate.types import Failed, Launched, LaunchResult, Skipped, WorkloadIdentity

MSG_SKIPPED: Final = "Scraper instance already running"
MSG_LAUNCHED: Final = "Scraper instance launched successfully"
MSG_FAILED: Final = "Failed to launch scraper instance"


class Response(TypedDict):
    statusCode: int
    body: str


def to_response(result: LaunchResult) -> Response:
    """Map a result onto the status envelope. Body is a JSON string."""
    match result:
        case Skipped():
            status, body = 200, {"message": MSG_SKIPPED}
        case Launched(instance_id=instance_id):
            status, body = 200, {"message": MSG_LAUNCHED, "instanceId": instance_id}
        case Failed(reason=reason):
            status, body = 500, {"message": MSG_FAILED, "error": reason}
    return {"statusCode": status, "body": json.dumps(body)}


async def evaluate(
    workload: WorkloadIdentity | str = DEFAULT_WORKLOAD,
    *,
    config_path: Path | None = None,
    modules: list[Module] | None = None,
) -> LaunchResult:
    """Load configuration, wire the gate and run a single evaluation.

    Args:
        workload: Workload identity to admit. Also names the code bundle
            and the service the worker payload installs.
        config_path: Optional ``skygate.toml`` location.
        modules: Override the backend modules. Default: ``[AWSModule()]``.
    """
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        return Failed(reason=str(e), stage="config")

    # bundle and service are named after the workload being admitted
    config = replace(config, bootstrap=worker_bootstrap(str(workload)))

    injector = Injector([GateModule(config), *(modules or [AWSModule()])])
    gate = injector.get(ProvisioningGate)
    return await gate.evaluate_and_launch(workload, config)


def handler(event: dict[str, Any] | None = None, context: Any = None) -> Response:
    """Serverless entry point."""
    handler_ids = setup_logging(LogConfig(level="INFO"))
    try:
        result = asyncio.run(evaluate())
    finally:
        teardown_logging(handler_ids)
    return to_response(result)


__all__ = [
    "MSG_FAILED",
    "MSG_LAUNCHED",
    "MSG_SKIPPED",
    "Response",
    "evaluate",
    "handler",
    "to_response",
]
