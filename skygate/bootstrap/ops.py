"""Core bootstrap operations.

Declarative operations for system setup on the worker: packages, code
bundle download, files and services. Each operation returns an Op.
"""

from __future__ import annotations

from collections.abc import Mapping

from .compose import Op

# =============================================================================
# Package Operations
# =============================================================================


def yum_update() -> Op:
    """Refresh installed packages.

    Example:
        >>> yum_update()()
        'yum update -y'
    """
    return lambda: "yum update -y"


def yum(*packages: str) -> Op:
    """Install YUM packages.

    Example:
        >>> yum("nodejs", "npm")()
        'yum install -y nodejs npm'
    """
    if not packages:
        return lambda: "# No YUM packages to install"

    pkg_list = " ".join(packages)
    return lambda: f"yum install -y {pkg_list}"


def npm_install() -> Op:
    return lambda: "npm install"


# =============================================================================
# Code Bundle Operations
# =============================================================================


def param(name: str) -> str:
    """Reference a template parameter.

    Returns a string (not an Op) for use in f-strings; the placeholder is
    filled in by ``BootstrapTemplate.render``.

    Example:
        >>> f"s3://{param('bucket')}/app.zip"
        's3://{bucket}/app.zip'
    """
    return f"{{{name}}}"


def s3_bundle(bucket: str, archive: str) -> Op:
    """Download a zip bundle from S3, unpack it in place and remove it.

    Args:
        bucket: Bucket name, usually ``param("bucket")``.
        archive: Object key of the zip archive.
    """

    def generate() -> str:
        return "\n".join([
            f"aws s3 cp s3://{bucket}/{archive} .",
            f"unzip -o {archive}",
            f"rm {archive}",
        ])

    return generate


# =============================================================================
# File Operations
# =============================================================================


def file(path: str, content: str, delimiter: str = "EOF") -> Op:
    """Write content to a file using a heredoc.

    Example:
        >>> file("/etc/test.conf", "key=value")()
        'cat > /etc/test.conf << EOF\\nkey=value\\nEOF'
    """
    return lambda: f"cat > {path} << {delimiter}\n{content}\n{delimiter}"


def chown(owner: str, path: str, recursive: bool = True) -> Op:
    flags = "-R " if recursive else ""
    return lambda: f"chown {flags}{owner} {path}"


def shell(cmd: str) -> Op:
    """Execute a raw shell command."""
    return lambda: cmd


# =============================================================================
# Service Operations
# =============================================================================


def systemd_unit(
    description: str,
    exec_start: str,
    *,
    user: str,
    working_directory: str,
    env: Mapping[str, str] | None = None,
    restart: str = "no",
) -> str:
    """Render a simple systemd unit file body.

    ``restart`` defaults to ``no``: the worker shuts itself down when idle
    and must not be brought back by systemd.
    """
    env_lines = [f'Environment="{k}={v}"' for k, v in (env or {}).items()]
    return "\n".join([
        "[Unit]",
        f"Description={description}",
        "After=network.target",
        "",
        "[Service]",
        "Type=simple",
        f"User={user}",
        f"WorkingDirectory={working_directory}",
        f"ExecStart={exec_start}",
        *env_lines,
        f"Restart={restart}",
        "StandardOutput=journal",
        "StandardError=journal",
        "",
        "[Install]",
        "WantedBy=multi-user.target",
    ])


def unit_file(name: str, unit: str) -> Op:
    """Write a unit file to ``/etc/systemd/system/<name>.service``."""
    return file(f"/etc/systemd/system/{name}.service", unit)


def systemctl_start(name: str) -> Op:
    """Reload units, then enable and start the service.

    Example:
        >>> systemctl_start("worker")()
        'systemctl daemon-reload\\nsystemctl enable worker.service\\nsystemctl start worker.service'
    """
    service = f"{name}.service"
    return lambda: "\n".join([
        "systemctl daemon-reload",
        f"systemctl enable {service}",
        f"systemctl start {service}",
    ])
