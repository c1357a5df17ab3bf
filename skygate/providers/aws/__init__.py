"""AWS EC2 backend for skygate.

Example:
    from injector import Injector
    from skygate.providers.aws import AWSModule, EC2Backend, EC2ClientFactory

    injector = Injector([AWSModule(), GateModule(config)])
    backend = injector.get(EC2Backend)
"""

from skygate.providers.aws.backend import EC2Backend, run_instances_params
from skygate.providers.aws.clients import AWSModule, EC2ClientFactory

__all__ = ["AWSModule", "EC2Backend", "EC2ClientFactory", "run_instances_params"]
