"""
Blockchain Interaction Package
Handles provider access, signing, and contract deployment
"""

from .provider import NetworkInfo, Provider, Web3Provider
from .signer import Signer, LocalAccountSigner, NodeAccountSigner, build_signer
from .contract_manager import ContractFactory, DeployedContract, ContractMetadata

__all__ = [
    'NetworkInfo',
    'Provider',
    'Web3Provider',
    'Signer',
    'LocalAccountSigner',
    'NodeAccountSigner',
    'build_signer',
    'ContractFactory',
    'DeployedContract',
    'ContractMetadata'
]
