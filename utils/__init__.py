"""
Utilities Package
Gas estimation, record persistence, explorer hints, and logging
"""

from .gas_calculator import GasCalculator, CostEstimate
from .deployment_store import DeploymentStore
from .logger import setup_logging

__all__ = [
    'GasCalculator',
    'CostEstimate',
    'DeploymentStore',
    'setup_logging'
]
