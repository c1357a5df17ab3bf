from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from skygate.config import GateConfig
from skygate.constants import InstanceState
from skygate.types import Instance, InstanceFilter, LaunchSpec, Tag


class FakeBackend:
    """In-memory provisioning backend recording every call."""

    def __init__(self) -> None:
        self.instances: list[Instance] = []
        self.queries: list[InstanceFilter] = []
        self.created: list[LaunchSpec] = []
        self.list_error: Exception | None = None
        self.create_error: Exception | None = None
        self.list_delay = 0.0
        self.create_delay = 0.0
        self.next_id = "i-123"

    @property
    def calls(self) -> int:
        return len(self.queries) + len(self.created)

    def add(self, instance_id: str, state: InstanceState, workload: str = "scraper") -> None:
        self.instances.append(Instance(instance_id, state, (Tag("Name", workload),)))

    async def list_instances(self, query: InstanceFilter) -> Sequence[Instance]:
        self.queries.append(query)
        if self.list_delay:
            await asyncio.sleep(self.list_delay)
        if self.list_error:
            raise self.list_error
        return [
            i for i in self.instances
            if i.tag(query.tag.key) == query.tag.value and i.state in query.states
        ]

    async def create_instance(self, spec: LaunchSpec) -> Instance:
        self.created.append(spec)
        if self.create_delay:
            await asyncio.sleep(self.create_delay)
        if self.create_error:
            raise self.create_error
        instance = Instance(self.next_id, InstanceState.PENDING, spec.tags)
        self.instances.append(instance)
        return instance


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def config() -> GateConfig:
    return GateConfig(
        bucket="scraper-artifacts",
        image_id="ami-03f4878755434977f",
        key_name="scraper-key",
        security_group_ids=("sg-0123456789abcdef0",),
        instance_profile="scraper-profile",
    )
