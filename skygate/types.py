"""Value types shared by the gate and its backends.

Everything here is immutable. A ``LaunchResult`` is an ADT; use pattern
matching to handle it:

    match result:
        case Skipped(active=ids):
            print(f"already running: {ids}")
        case Launched(instance_id=iid):
            print(f"launched {iid}")
        case Failed(reason=reason):
            print(f"failed: {reason}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from skygate.constants import ACTIVE_STATES, GateTag, InstanceState
from skygate.exceptions import ConfigurationError

# =============================================================================
# Tags & Identity
# =============================================================================


@dataclass(frozen=True, slots=True)
class Tag:
    """A single key/value resource tag."""

    key: str
    value: str

    def to_aws(self) -> dict[str, str]:
        return {"Key": str(self.key), "Value": str(self.value)}


@dataclass(frozen=True, slots=True)
class WorkloadIdentity:
    """Names the logical workload an instance belongs to.

    Used both as the query filter and as the tag stamped on new instances.
    """

    value: str
    key: str = GateTag.WORKLOAD

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ConfigurationError("workload identity must be a non-empty string")

    @property
    def tag(self) -> Tag:
        return Tag(self.key, self.value)

    @classmethod
    def of(cls, value: WorkloadIdentity | str) -> WorkloadIdentity:
        match value:
            case WorkloadIdentity():
                return value
            case _:
                return cls(value)

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Backend Views
# =============================================================================


@dataclass(frozen=True, slots=True)
class Instance:
    """An instance as reported by the provisioning backend."""

    id: str
    state: InstanceState
    tags: tuple[Tag, ...] = ()

    @property
    def active(self) -> bool:
        return self.state in ACTIVE_STATES

    def tag(self, key: str) -> str | None:
        return next((t.value for t in self.tags if t.key == key), None)


@dataclass(frozen=True, slots=True)
class InstanceFilter:
    """Query for instances carrying ``tag`` in one of ``states``."""

    tag: Tag
    states: frozenset[InstanceState] = ACTIVE_STATES


@dataclass(frozen=True, slots=True)
class LaunchSpec:
    """Everything needed to create exactly one instance.

    ``user_data`` is already encoded the way the backend expects it
    (base64 text for EC2).
    """

    image_id: str
    instance_type: str
    key_name: str
    security_group_ids: tuple[str, ...]
    instance_profile: str
    user_data: str
    tags: tuple[Tag, ...]
    min_count: int = 1
    max_count: int = 1

    def tag(self, key: str) -> str | None:
        return next((t.value for t in self.tags if t.key == key), None)


# =============================================================================
# Results
# =============================================================================

type Stage = Literal["config", "query", "launch"]


@dataclass(frozen=True, slots=True)
class Skipped:
    """An active instance already exists; nothing was launched."""

    active: tuple[str, ...] = field(default=())


@dataclass(frozen=True, slots=True)
class Launched:
    """Exactly one new instance was created."""

    instance_id: str


@dataclass(frozen=True, slots=True)
class Failed:
    """The invocation failed. Backend state is unknown after a launch failure."""

    reason: str
    stage: Stage


type LaunchResult = Skipped | Launched | Failed


__all__ = [
    "Tag",
    "WorkloadIdentity",
    "Instance",
    "InstanceFilter",
    "LaunchSpec",
    "Stage",
    "Skipped",
    "Launched",
    "Failed",
    "LaunchResult",
]
