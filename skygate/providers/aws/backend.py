"""EC2 implementation of the provisioning backend."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from skygate.constants import InstanceState
from skygate.exceptions import LaunchError, QueryError
from skygate.types import Instance, InstanceFilter, LaunchSpec, Tag

from .clients import EC2ClientFactory

log = logger.bind(component="ec2-backend")


def describe_filters(query: InstanceFilter) -> list[dict[str, Any]]:
    return [
        {"Name": f"tag:{query.tag.key}", "Values": [query.tag.value]},
        {"Name": "instance-state-name", "Values": sorted(str(s) for s in query.states)},
    ]


def run_instances_params(spec: LaunchSpec) -> dict[str, Any]:
    """Translate a LaunchSpec into RunInstances keyword arguments."""
    return {
        "ImageId": spec.image_id,
        "InstanceType": spec.instance_type,
        "KeyName": spec.key_name,
        "SecurityGroupIds": list(spec.security_group_ids),
        "IamInstanceProfile": {"Name": spec.instance_profile},
        "MinCount": spec.min_count,
        "MaxCount": spec.max_count,
        "UserData": spec.user_data,
        "TagSpecifications": [
            {
                "ResourceType": "instance",
                "Tags": [t.to_aws() for t in spec.tags],
            }
        ],
    }


def parse_instance(raw: dict[str, Any]) -> Instance:
    return Instance(
        id=raw["InstanceId"],
        state=InstanceState(raw.get("State", {}).get("Name", InstanceState.PENDING)),
        tags=tuple(Tag(t["Key"], t["Value"]) for t in raw.get("Tags", [])),
    )


class EC2Backend:
    """Provisioning backend over the EC2 API.

    Every botocore failure is translated into ``QueryError`` or
    ``LaunchError`` with botocore's message kept verbatim.
    """

    def __init__(self, ec2: EC2ClientFactory) -> None:
        self.ec2 = ec2

    async def list_instances(self, query: InstanceFilter) -> Sequence[Instance]:
        filters = describe_filters(query)
        log.debug("Describing instances with {filters}", filters=filters)

        try:
            async with self.ec2() as ec2:
                paginator = ec2.get_paginator("describe_instances")
                instances = [
                    parse_instance(raw)
                    async for page in paginator.paginate(Filters=filters)
                    for reservation in page.get("Reservations", [])
                    for raw in reservation.get("Instances", [])
                ]
        except (ClientError, BotoCoreError) as e:
            raise QueryError(str(e)) from e

        return [i for i in instances if i.state in query.states]

    async def create_instance(self, spec: LaunchSpec) -> Instance:
        try:
            async with self.ec2() as ec2:
                response = await ec2.run_instances(**run_instances_params(spec))
        except (ClientError, BotoCoreError) as e:
            raise LaunchError(str(e)) from e

        match response.get("Instances", []):
            case [first, *rest]:
                if rest:
                    log.warning(
                        "RunInstances returned {n} instances, expected 1",
                        n=len(rest) + 1,
                    )
                return parse_instance(first)
            case _:
                raise LaunchError("RunInstances returned no instances")


__all__ = [
    "EC2Backend",
    "describe_filters",
    "parse_instance",
    "run_instances_params",
]
