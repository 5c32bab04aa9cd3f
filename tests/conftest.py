"""
Shared fixtures for deployment tests
"""

import pytest
from unittest.mock import AsyncMock, Mock

from blockchain.contract_manager import ContractMetadata
from blockchain.provider import NetworkInfo
from deployer.config import ContractSettings, DeploySettings, NetworkSettings


DEPLOYER = '0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266'
CONTRACT_ADDRESS = '0x5fbdb2315678afecb367f032d93f642f64180aa3'
TX_HASH = '0x' + 'ab' * 32
GWEI = 10 ** 9


def make_settings(tmp_path, chain_id=None, network_name='polygon', **overrides):
    """DeploySettings writing records under tmp_path"""
    network = NetworkSettings(
        name=network_name,
        rpc_url='http://127.0.0.1:8545',
        chain_id=chain_id,
        gas_price_gwei=overrides.pop('gas_price_gwei', None),
        gas_limit=overrides.pop('gas_limit', None),
        explorer_url=overrides.pop('explorer_url', None)
    )
    contract = ContractSettings(
        artifact_path='artifacts/CertiProofNFT.json',
        name='CertiProof X',
        symbol='CERTX',
        version='1.0.0',
        author='Kai Zenjiro (0xGenesis)',
        contact='certiproofx@protonmail.me'
    )
    return DeploySettings(
        contract=contract,
        network=network,
        deployments_dir=str(tmp_path / 'deployments'),
        **overrides
    )


def make_receipt(block_number=100, gas_used=2_500_000, status=1, address=CONTRACT_ADDRESS):
    return {
        'status': status,
        'contractAddress': address,
        'blockNumber': block_number,
        'gasUsed': gas_used,
        'effectiveGasPrice': 30 * GWEI,
        'transactionHash': TX_HASH,
    }


def make_metadata(name='CertiProof X', symbol='CERTX', owner=DEPLOYER):
    return ContractMetadata(
        version='1.0.0',
        author='Kai Zenjiro (0xGenesis)',
        contact='certiproofx@protonmail.me',
        wallet=DEPLOYER,
        owner=owner,
        name=name,
        symbol=symbol
    )


def make_provider(chain_id=137, network_name='polygon'):
    """Mock Provider"""
    provider = Mock()
    provider.get_network = AsyncMock(return_value=NetworkInfo(name=network_name, chain_id=chain_id))
    provider.estimate_gas = AsyncMock(return_value=2_000_000)
    provider.get_gas_price = AsyncMock(return_value=30 * GWEI)
    return provider


def make_contract(address=CONTRACT_ADDRESS, tx_hash=TX_HASH, metadata=None):
    """Mock DeployedContract"""
    contract = Mock()
    contract.address = address
    contract.transaction_hash = tx_hash
    contract.wait_for_inclusion = AsyncMock(return_value=make_receipt(address=address))
    contract.wait_for_confirmations = AsyncMock(return_value=make_receipt(address=address))
    contract.read_metadata = AsyncMock(return_value=metadata or make_metadata())
    return contract


@pytest.fixture
def signer():
    """Mock Signer"""
    signer = Mock()
    signer.address = DEPLOYER
    signer.get_balance = AsyncMock(return_value=10 ** 18)
    return signer


@pytest.fixture
def contract():
    return make_contract()


@pytest.fixture
def factory(contract):
    """Mock ContractFactory"""
    factory = Mock()
    factory.get_deploy_transaction = Mock(return_value={'from': DEPLOYER, 'data': '0x6080'})
    factory.deploy = AsyncMock(return_value=contract)
    return factory
