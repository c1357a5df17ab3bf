"""AWS client factories with dependency injection.

Provides typed client factories that can be injected into components.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import TYPE_CHECKING, Any

import aioboto3
from botocore.config import Config
from injector import Module, provider, singleton

from skygate.config import GateConfig

if TYPE_CHECKING:
    from types_aiobotocore_ec2 import EC2Client


# =============================================================================
# Client Type
# =============================================================================

type Client[T] = Callable[[], AbstractAsyncContextManager[T]]
"""Factory that returns an async context manager for a client."""


class EC2ClientFactory:
    """Wrapper for EC2 client factory."""

    def __init__(self, factory: Callable[[], AbstractAsyncContextManager[Any]]) -> None:
        self._factory = factory

    def __call__(self) -> AbstractAsyncContextManager[EC2Client]:
        return self._factory()


def client_config(config: GateConfig) -> Config:
    """botocore settings for a single-attempt, time-bounded client.

    The gate never retries; the trigger re-firing is the retry.
    """
    return Config(
        region_name=config.region,
        connect_timeout=config.request_timeout,
        read_timeout=config.request_timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )


# =============================================================================
# AWS Module
# =============================================================================


class AWSModule(Module):
    """DI module that provides AWS client factories.

    Usage:
        >>> from injector import Injector
        >>> from skygate.providers.aws import AWSModule
        >>>
        >>> injector = Injector([AWSModule()])
        >>> injector.binder.bind(GateConfig, to=GateConfig.from_env())
        >>>
        >>> # In a component:
        >>> class MyBackend:
        ...     ec2: Client[EC2Client]
        ...
        ...     async def do_something(self):
        ...         async with self.ec2() as client:
        ...             await client.describe_instances()
    """

    @singleton
    @provider
    def provide_session(self) -> aioboto3.Session:
        """Provide singleton aioboto3 session."""
        return aioboto3.Session()

    @singleton
    @provider
    def provide_ec2(self, session: aioboto3.Session, config: GateConfig) -> EC2ClientFactory:
        """Provide EC2 client factory."""
        settings = client_config(config)

        @asynccontextmanager
        async def factory() -> AsyncIterator[Any]:
            async with session.client("ec2", region_name=config.region, config=settings) as client:
                yield client

        return EC2ClientFactory(factory)


__all__ = [
    "AWSModule",
    "Client",
    "EC2ClientFactory",
    "client_config",
]
