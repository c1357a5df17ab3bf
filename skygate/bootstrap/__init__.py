"""Declarative bootstrap script DSL.

Builds the opaque shell payload a new worker runs at first boot.

Example:
    >>> from skygate.bootstrap import template, yum, shell, param
    >>>
    >>> t = template(
    ...     yum("git"),
    ...     shell(f"aws s3 cp s3://{param('bucket')}/app.zip ."),
    ...     params=("bucket",),
    ... )
    >>> t.encode(bucket="artifacts")  # base64 user data
"""

from __future__ import annotations

from .compose import HEADER, Op, bootstrap, resolve
from .ops import (
    chown,
    file,
    npm_install,
    param,
    s3_bundle,
    shell,
    systemctl_start,
    systemd_unit,
    unit_file,
    yum,
    yum_update,
)
from .template import BootstrapTemplate, template
from .worker import worker_bootstrap, worker_unit

__all__ = [
    # Core types
    "HEADER",
    "Op",
    "bootstrap",
    "resolve",
    # Templates
    "BootstrapTemplate",
    "template",
    "worker_bootstrap",
    "worker_unit",
    # Operations
    "chown",
    "file",
    "npm_install",
    "param",
    "s3_bundle",
    "shell",
    "systemctl_start",
    "systemd_unit",
    "unit_file",
    "yum",
    "yum_update",
]
