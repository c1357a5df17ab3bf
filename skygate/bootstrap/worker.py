"""Default worker bootstrap.

The worker fetches its code bundle from the configured bucket, installs a
Node.js runtime and headless browser libraries, and registers itself as a
systemd service that shuts the machine down after an idle period.
"""

from __future__ import annotations

from skygate.constants import (
    BROWSER_PACKAGES,
    DEFAULT_WORKLOAD,
    SHUTDOWN_DELAY_MS,
    WORKER_ENTRYPOINT,
    WORKER_HOME,
    WORKER_USER,
)

from .ops import (
    chown,
    npm_install,
    param,
    s3_bundle,
    systemctl_start,
    systemd_unit,
    unit_file,
    yum,
    yum_update,
)
from .template import BootstrapTemplate, template


def worker_unit(description: str = "Design Hackathon Scraper") -> str:
    return systemd_unit(
        description,
        f"/usr/bin/node {WORKER_HOME}/{WORKER_ENTRYPOINT}",
        user=WORKER_USER,
        working_directory=WORKER_HOME,
        env={
            "AUTO_SHUTDOWN": "true",
            "SHUTDOWN_DELAY": str(SHUTDOWN_DELAY_MS),
            "NODE_ENV": "production",
        },
    )


def worker_bootstrap(name: str = DEFAULT_WORKLOAD) -> BootstrapTemplate:
    """Build the worker payload template.

    Args:
        name: Used for both the bundle (``<name>.zip``) and the service name.

    Returns:
        Template with a single ``bucket`` parameter.
    """
    return template(
        yum_update(),
        yum("nodejs", "npm", "git"),
        yum(*BROWSER_PACKAGES),
        s3_bundle(param("bucket"), f"{name}.zip"),
        npm_install(),
        unit_file(name, worker_unit()),
        chown(f"{WORKER_USER}:{WORKER_USER}", WORKER_HOME),
        systemctl_start(name),
        params=("bucket",),
    )
