"""skygate - launch exactly one worker instance on demand.

Example:

    from skygate import GateConfig, ProvisioningGate, Launched
    from skygate.providers.aws import EC2Backend

    config = GateConfig.from_env()
    gate = ProvisioningGate(EC2Backend(ec2))

    match await gate.evaluate_and_launch("design-hackathon-scraper", config):
        case Launched(instance_id=iid):
            print(f"started {iid}")
"""

# Importing skygate.logging disables the skygate namespace until configured
from skygate.logging import LogConfig, setup_logging, teardown_logging

from skygate.config import GateConfig, load_config
from skygate.exceptions import (
    BackendError,
    ConfigurationError,
    GateError,
    LaunchError,
    QueryError,
)
from skygate.gate import ProvisioningGate, build_launch_spec
from skygate.providers.protocol import ProvisioningBackend
from skygate.types import (
    Failed,
    Instance,
    InstanceFilter,
    Launched,
    LaunchResult,
    LaunchSpec,
    Skipped,
    Tag,
    WorkloadIdentity,
)

__all__ = [
    # Configuration
    "GateConfig",
    "load_config",
    # Gate
    "ProvisioningGate",
    "ProvisioningBackend",
    "build_launch_spec",
    # Types
    "Instance",
    "InstanceFilter",
    "LaunchSpec",
    "Tag",
    "WorkloadIdentity",
    # Results
    "Failed",
    "Launched",
    "LaunchResult",
    "Skipped",
    # Logging
    "LogConfig",
    "setup_logging",
    "teardown_logging",
    # Errors
    "BackendError",
    "ConfigurationError",
    "GateError",
    "LaunchError",
    "QueryError",
]
