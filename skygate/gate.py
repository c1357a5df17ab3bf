"""Idempotent admission check for a single named workload.

Flow per invocation:
    validate config → query active instances → Skipped
                                             → build launch spec → create → Launched
    any error along the way                                       → Failed(stage)

Concurrency:
    There is a window between the query and the create call. Two
    invocations racing through it can both observe no active instance and
    both launch, leaving two active workers until one idles out. No lock or
    conditional create closes this window; the backend's instance set is
    the only shared state. Callers needing a hard guarantee must serialize
    triggers externally.

    A query that fails or times out is a failure, never "nothing running".
"""

from __future__ import annotations

import asyncio

from loguru import logger

from skygate.config import GateConfig
from skygate.constants import AUTO_SHUTDOWN_VALUE, PURPOSE_VALUE, GateTag
from skygate.exceptions import ConfigurationError, GateError, LaunchError, QueryError
from skygate.providers.protocol import ProvisioningBackend
from skygate.types import (
    Failed,
    Instance,
    InstanceFilter,
    Launched,
    LaunchResult,
    LaunchSpec,
    Skipped,
    Stage,
    Tag,
    WorkloadIdentity,
)

log = logger.bind(component="gate")


def launch_tags(identity: WorkloadIdentity) -> tuple[Tag, ...]:
    return (
        identity.tag,
        Tag(GateTag.PURPOSE, PURPOSE_VALUE),
        Tag(GateTag.AUTO_SHUTDOWN, AUTO_SHUTDOWN_VALUE),
    )


def build_launch_spec(identity: WorkloadIdentity, config: GateConfig) -> LaunchSpec:
    """Build the launch spec for exactly one instance of ``identity``.

    Raises:
        ConfigurationError: If a required field is missing or the bootstrap
            template cannot be rendered.
    """
    config.validate()
    return LaunchSpec(
        image_id=config.image_id or "",
        instance_type=config.instance_type,
        key_name=config.key_name or "",
        security_group_ids=config.security_group_ids,
        instance_profile=config.instance_profile or "",
        user_data=config.render_user_data(),
        tags=launch_tags(identity),
        min_count=1,
        max_count=1,
    )


def _stage(error: GateError) -> Stage:
    match error:
        case QueryError():
            return "query"
        case LaunchError():
            return "launch"
        case _:
            return "config"


class ProvisioningGate:
    """Ensures at most one active instance per workload, one launch attempt per call.

    Args:
        backend: Provisioning backend. Only read from and appended to.

    Example:
        >>> gate = ProvisioningGate(EC2Backend(ec2))
        >>> match await gate.evaluate_and_launch("scraper", config):
        ...     case Launched(instance_id=iid):
        ...         print(iid)
    """

    def __init__(self, backend: ProvisioningBackend) -> None:
        self.backend = backend

    async def evaluate_and_launch(
        self,
        identity: WorkloadIdentity | str,
        config: GateConfig,
    ) -> LaunchResult:
        """Run one admission check and, if admitted, one launch attempt.

        Never raises: every error comes back as ``Failed`` tagged with the
        stage reached. After a ``Failed`` from the launch stage the backend
        may still have created the instance.
        """
        stage: Stage = "config"
        try:
            workload = WorkloadIdentity.of(identity)
            config.validate()

            stage = "query"
            active = await self._active_instances(workload, config.request_timeout)
            if active:
                ids = tuple(i.id for i in active)
                log.info("Workload {w} already active on {ids}, skipping", w=workload, ids=ids)
                return Skipped(active=ids)

            spec = build_launch_spec(workload, config)
            stage = "launch"
            instance = await self._launch(spec, config.request_timeout)
        except ConfigurationError as e:
            log.warning("Configuration error: {e}", e=e)
            return Failed(reason=str(e), stage="config")
        except GateError as e:
            stage = _stage(e)
            log.error("Gate failed during {stage}: {e}", stage=stage, e=e)
            return Failed(reason=str(e), stage=stage)
        except Exception as e:
            log.exception("Unexpected error during {stage}", stage=stage)
            return Failed(reason=str(e) or type(e).__name__, stage=stage)

        log.info("Launched {iid} for workload {w}", iid=instance.id, w=workload)
        return Launched(instance_id=instance.id)

    async def _active_instances(
        self,
        workload: WorkloadIdentity,
        timeout: float,
    ) -> list[Instance]:
        query = InstanceFilter(tag=workload.tag)
        log.debug("Querying active instances for {w}", w=workload)
        try:
            found = await asyncio.wait_for(self.backend.list_instances(query), timeout=timeout)
        except TimeoutError as e:
            raise QueryError(f"Instance query timeout after {timeout:g}s") from e
        return [i for i in found if i.active]

    async def _launch(self, spec: LaunchSpec, timeout: float) -> Instance:
        log.info(
            "Launching {type} from {image}",
            type=spec.instance_type,
            image=spec.image_id,
        )
        try:
            return await asyncio.wait_for(self.backend.create_instance(spec), timeout=timeout)
        except TimeoutError as e:
            raise LaunchError(
                f"Instance launch timeout after {timeout:g}s; instance state unknown"
            ) from e


__all__ = ["ProvisioningGate", "build_launch_spec", "launch_tags"]
