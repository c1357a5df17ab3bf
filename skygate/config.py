"""Gate configuration.

Values come from the process environment, optionally layered over a
``skygate.toml`` file:

    [gate]
    bucket = "my-artifacts"
    image_id = "ami-03f4878755434977f"

The environment always wins over the file. Instance type, tag values and
timeouts are compiled-in defaults and are not read from either source.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from skygate.bootstrap.template import BootstrapTemplate
from skygate.bootstrap.worker import worker_bootstrap
from skygate.constants import DEFAULT_INSTANCE_TYPE, DEFAULT_REGION, DEFAULT_REQUEST_TIMEOUT
from skygate.exceptions import ConfigurationError

type RawConfig = dict[str, Any]

PROJECT_CONFIG_NAME: Final = "skygate.toml"

# field name -> environment variable
ENV_VARS: Final[dict[str, str]] = {
    "region": "AWS_REGION",
    "bucket": "S3_BUCKET",
    "image_id": "IMAGE_ID",
    "key_name": "KEY_PAIR_NAME",
    "security_group_ids": "SECURITY_GROUP_ID",
    "instance_profile": "IAM_INSTANCE_PROFILE",
}

# required field name -> human name used in error messages
REQUIRED: Final[dict[str, str]] = {
    "bucket": "S3 bucket",
    "image_id": "image",
    "key_name": "key pair",
    "security_group_ids": "security group",
    "instance_profile": "instance profile",
}


def _split_groups(raw: str | list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
    match raw:
        case None:
            return ()
        case str():
            return tuple(g.strip() for g in raw.split(",") if g.strip())
        case _:
            return tuple(g.strip() for g in raw if g.strip())


@dataclass(frozen=True, slots=True)
class GateConfig:
    """Launch configuration for one workload.

    Required fields may be left empty at construction; ``validate()`` is
    what enforces them, so a misconfigured deployment still produces a
    structured failure instead of an import-time crash.

    Args:
        bucket: Bucket holding the worker code bundle.
        image_id: Machine image (AMI) to boot.
        key_name: EC2 key pair name.
        security_group_ids: One or more security group ids.
        instance_profile: IAM instance profile name.
        region: Backend region. Default: ap-south-1
        instance_type: Instance size. Default: t2.micro
        request_timeout: Bound, in seconds, on each backend call.
        bootstrap: Payload template, interpolated with ``bucket``.
    """

    bucket: str | None = None
    image_id: str | None = None
    key_name: str | None = None
    security_group_ids: tuple[str, ...] = ()
    instance_profile: str | None = None
    region: str = DEFAULT_REGION
    instance_type: str = DEFAULT_INSTANCE_TYPE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    bootstrap: BootstrapTemplate = field(default_factory=worker_bootstrap)

    @property
    def missing(self) -> tuple[str, ...]:
        """Human names of required fields that are unset or blank."""
        return tuple(
            human
            for name, human in REQUIRED.items()
            if not _present(getattr(self, name))
        )

    def validate(self) -> GateConfig:
        """Fail fast on missing configuration. Returns self for chaining."""
        if missing := self.missing:
            env = ", ".join(
                f"{human} ({ENV_VARS[name]})"
                for name, human in REQUIRED.items()
                if human in missing
            )
            raise ConfigurationError(f"Missing required configuration: {env}", missing)

        if self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be positive, got {self.request_timeout}")

        self.bootstrap.check(bucket=self.bucket)
        return self

    def render_user_data(self) -> str:
        """Base64 text of the bootstrap payload for this configuration."""
        return self.bootstrap.encode(bucket=self.bucket)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> GateConfig:
        unknown = set(raw) - set(ENV_VARS)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        for key, value in raw.items():
            _check_type(key, value)

        values: dict[str, Any] = {k: v for k, v in raw.items() if v not in (None, "")}
        if "security_group_ids" in values:
            values["security_group_ids"] = _split_groups(values["security_group_ids"])
        return cls(**values)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GateConfig:
        env = os.environ if environ is None else environ
        return cls.from_mapping(_env_values(env))


def _check_type(key: str, value: object) -> None:
    match key, value:
        case _, None | str():
            return
        case "security_group_ids", list() | tuple() if all(isinstance(g, str) for g in value):
            return
        case "security_group_ids", _:
            expected = "a string or a list of strings"
        case _:
            expected = "a string"
    raise ConfigurationError(
        f"Invalid configuration value for {key}: expected {expected}, got {type(value).__name__}"
    )


def _present(value: object) -> bool:
    match value:
        case str():
            return bool(value.strip())
        case tuple():
            return bool(value)
        case _:
            return value is not None


def _env_values(environ: Mapping[str, str]) -> RawConfig:
    return {
        name: environ[var]
        for name, var in ENV_VARS.items()
        if environ.get(var, "").strip()
    }


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e


def load_config(
    path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> GateConfig:
    """Build a config from ``skygate.toml`` (if present) overlaid by the environment.

    Does not validate; the gate does that at the start of each invocation.
    """
    file_cfg = _read_toml(path or Path.cwd() / PROJECT_CONFIG_NAME).get("gate", {})
    if not isinstance(file_cfg, dict):
        raise ConfigurationError("[gate] in config file must be a table")

    env = os.environ if environ is None else environ
    return GateConfig.from_mapping({**file_cfg, **_env_values(env)})


__all__ = [
    "ENV_VARS",
    "GateConfig",
    "PROJECT_CONFIG_NAME",
    "REQUIRED",
    "load_config",
]
