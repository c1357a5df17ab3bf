"""Bootstrap template with named interpolation points.

A ``BootstrapTemplate`` is rendered script text plus the names of the
parameters it expects. Only ``{name}`` placeholders for declared names are
substituted; every other brace in the script (shell ``${VAR}``, heredocs)
is left alone.
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass

from skygate.exceptions import ConfigurationError

from .compose import HEADER, Op, bootstrap


@dataclass(frozen=True, slots=True)
class BootstrapTemplate:
    """Immutable payload template.

    Example:
        >>> t = template(shell("aws s3 cp s3://{bucket}/app.zip ."), params=("bucket",))
        >>> t.render(bucket="artifacts")
        '#!/bin/bash\\naws s3 cp s3://artifacts/app.zip .\\n'
    """

    script: str
    params: frozenset[str]

    def __post_init__(self) -> None:
        for name in self.params:
            if not name.isidentifier():
                raise ValueError(f"Invalid template parameter name: {name!r}")
            if f"{{{name}}}" not in self.script:
                raise ValueError(f"Template parameter {name!r} does not appear in the script")

    def check(self, **values: object) -> None:
        """Validate values against the declared parameters without rendering."""
        unknown = set(values) - self.params
        if unknown:
            raise ConfigurationError(
                f"Unknown bootstrap parameters: {', '.join(sorted(unknown))}"
            )
        missing = tuple(
            sorted(name for name in self.params if not str(values.get(name) or "").strip())
        )
        if missing:
            raise ConfigurationError(
                f"Missing bootstrap parameters: {', '.join(missing)}", missing
            )

    def render(self, **values: object) -> str:
        self.check(**values)
        if not self.params:
            return self.script
        pattern = re.compile(r"\{(" + "|".join(map(re.escape, self.params)) + r")\}")
        return pattern.sub(lambda m: str(values[m.group(1)]), self.script)

    def encode(self, **values: object) -> str:
        """Render and return base64 text, the encoding EC2 user data expects."""
        return base64.b64encode(self.render(**values).encode()).decode()


def template(
    *ops: Op | None,
    params: tuple[str, ...] | frozenset[str] = (),
    header: str = HEADER,
) -> BootstrapTemplate:
    """Compose ops into a template expecting ``params`` at render time."""
    return BootstrapTemplate(script=bootstrap(*ops, header=header), params=frozenset(params))
