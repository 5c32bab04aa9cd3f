"""
CertiProof Deployer Core Package
Configuration, confirmation policy, and deployment records

The orchestrator lives in deployer.orchestrator; it depends on the
blockchain and utils packages, which in turn import from here.
"""

from .config import DeploySettings, ContractSettings, NetworkSettings, build_settings
from .confirmations import ConfirmationPolicy
from .records import DeploymentRecord

__all__ = [
    'DeploySettings',
    'ContractSettings',
    'NetworkSettings',
    'build_settings',
    'ConfirmationPolicy',
    'DeploymentRecord'
]
