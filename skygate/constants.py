"""Centralized constants and enums for skygate.

Tag keys, tag values, instance states and compiled-in launch defaults live
here so the gate, the backend and the tests agree on the literals.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

# =============================================================================
# EC2 Resource Tags
# =============================================================================


class GateTag(StrEnum):
    """EC2 tag keys stamped on every launched instance."""

    WORKLOAD = "Name"
    PURPOSE = "Purpose"
    AUTO_SHUTDOWN = "AutoShutdown"


PURPOSE_VALUE: Final = "automated-scraping"
AUTO_SHUTDOWN_VALUE: Final = "true"


# =============================================================================
# EC2 Instance States
# =============================================================================


class InstanceState(StrEnum):
    """EC2 instance state names."""

    PENDING = "pending"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"

    @property
    def active(self) -> bool:
        return self in ACTIVE_STATES


ACTIVE_STATES: Final = frozenset({InstanceState.PENDING, InstanceState.RUNNING})


# =============================================================================
# Launch Defaults
# =============================================================================

DEFAULT_WORKLOAD: Final = "design-hackathon-scraper"
DEFAULT_REGION: Final = "ap-south-1"
DEFAULT_INSTANCE_TYPE: Final = "t2.micro"

# Timeouts (in seconds)
DEFAULT_REQUEST_TIMEOUT: Final = 30.0


# =============================================================================
# Worker Bootstrap
# =============================================================================

WORKER_USER: Final = "ec2-user"
WORKER_HOME: Final = f"/home/{WORKER_USER}"
WORKER_ENTRYPOINT: Final = "server.js"
SHUTDOWN_DELAY_MS: Final = 30000

# Headless browser runtime libraries for Amazon Linux 2
BROWSER_PACKAGES: Final = (
    "alsa-lib",
    "atk",
    "cups-libs",
    "gtk3",
    "ipa-gothic-fonts",
    "libXcomposite",
    "libXcursor",
    "libXdamage",
    "libXext",
    "libXi",
    "libXrandr",
    "libXScrnSaver",
    "libXss",
    "libXtst",
    "pango",
    "xorg-x11-fonts-100dpi",
    "xorg-x11-fonts-75dpi",
    "xorg-x11-utils",
    "xorg-x11-fonts-cyrillic",
    "xorg-x11-fonts-Type1",
    "xorg-x11-fonts-misc",
)
