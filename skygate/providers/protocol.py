"""Provisioning backend capability.

The gate only ever reads the instance set and appends to it; a backend
never needs to update or delete anything on its behalf.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from skygate.types import Instance, InstanceFilter, LaunchSpec

__all__ = ["ProvisioningBackend"]


@runtime_checkable
class ProvisioningBackend(Protocol):
    """Create and query compute instances.

    Implementations raise ``QueryError`` / ``LaunchError`` carrying the
    backend's own message. Anything else escaping them is a bug.
    """

    async def list_instances(self, query: InstanceFilter) -> Sequence[Instance]:
        """Instances carrying ``query.tag`` whose state is in ``query.states``."""
        ...

    async def create_instance(self, spec: LaunchSpec) -> Instance:
        """Create exactly one instance and return it as first reported."""
        ...
