"""Provisioning backends for skygate."""

from skygate.providers.protocol import ProvisioningBackend

__all__ = ["ProvisioningBackend"]
