"""Central DI module for skygate.

Wires the configuration, the backend and the gate:

    injector = Injector([GateModule(config), AWSModule()])
    gate = injector.get(ProvisioningGate)
"""

from __future__ import annotations

from injector import Binder, Module, provider, singleton

from .config import GateConfig
from .gate import ProvisioningGate
from .providers.aws.backend import EC2Backend
from .providers.aws.clients import EC2ClientFactory
from .providers.protocol import ProvisioningBackend


class GateModule(Module):
    """Binds one GateConfig and provides the gate over the EC2 backend."""

    def __init__(self, config: GateConfig) -> None:
        self._config = config

    def configure(self, binder: Binder) -> None:
        binder.bind(GateConfig, to=self._config)

    @singleton
    @provider
    def provide_backend(self, ec2: EC2ClientFactory) -> ProvisioningBackend:
        return EC2Backend(ec2)

    @singleton
    @provider
    def provide_gate(self, backend: ProvisioningBackend) -> ProvisioningGate:
        return ProvisioningGate(backend)


__all__ = ["GateModule"]
