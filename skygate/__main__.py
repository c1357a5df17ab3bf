"""Run one evaluation from the command line.

    python -m skygate --workload design-hackathon-scraper --config skygate.toml

``--workload`` sets both the instance tag and the bundle/service the worker
payload installs.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from rich.console import Console

from skygate.constants import DEFAULT_WORKLOAD
from skygate.handler import evaluate, to_response
from skygate.logging import LogConfig, setup_logging, teardown_logging
from skygate.types import Failed


def cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="skygate",
        description="Launch one worker instance unless one is already active",
    )
    parser.add_argument(
        "--workload",
        default=DEFAULT_WORKLOAD,
        help="Workload tag value; also names the code bundle and service",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to skygate.toml")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Also append logs to this file")
    args = parser.parse_args(argv)

    handler_ids = setup_logging(LogConfig(level=args.log_level, file=args.log_file))
    try:
        result = asyncio.run(evaluate(args.workload, config_path=args.config))
    finally:
        teardown_logging(handler_ids)

    Console().print_json(json.dumps(to_response(result)))
    return 1 if isinstance(result, Failed) else 0


if __name__ == "__main__":
    sys.exit(cli())
