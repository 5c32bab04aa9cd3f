"""
Contract Manager
Loads the compiled CertiProofNFT artifact, deploys it and reads it back
"""

import os
import json
from dataclasses import dataclass
from typing import Dict, List, Optional
from web3 import AsyncWeb3
from loguru import logger

from deployer.exceptions import ArtifactNotFoundError, TransactionRevertedError


# Read-only accessors exposed by CertiProofNFT
METADATA_FUNCTIONS = ('VERSION', 'AUTHOR', 'CONTACT', 'WALLET', 'owner', 'name', 'symbol')


@dataclass(frozen=True)
class ContractMetadata:
    """Values read back from a deployed contract"""

    version: str
    author: str
    contact: str
    wallet: str
    owner: str
    name: str
    symbol: str


def load_artifact(artifact_path: str) -> Dict:
    """
    Load a Hardhat compilation artifact

    Raises:
        ArtifactNotFoundError: If the file is missing or has no abi/bytecode
    """
    if not os.path.exists(artifact_path):
        raise ArtifactNotFoundError(
            f"Contract artifact not found: {artifact_path} (run 'npx hardhat compile' first)"
        )

    with open(artifact_path, 'r', encoding='utf-8') as f:
        artifact = json.load(f)

    if not artifact.get('abi') or not artifact.get('bytecode') or artifact['bytecode'] == '0x':
        raise ArtifactNotFoundError(f"Artifact has no abi or bytecode: {artifact_path}")

    return artifact


class DeployedContract:
    """
    Handle to a contract deployment

    The address is known once the deployment transaction is mined.
    """

    def __init__(self, w3: AsyncWeb3, provider, abi: List[Dict], transaction_hash: str):
        """
        Initialize handle

        Args:
            w3: AsyncWeb3 instance
            provider: Provider used to wait for the transaction
            abi: Contract ABI
            transaction_hash: Hash of the deployment transaction
        """
        self.w3 = w3
        self.provider = provider
        self.abi = abi
        self.transaction_hash = transaction_hash
        self.address: Optional[str] = None
        self.receipt: Optional[Dict] = None
        self._contract = None

    async def wait_for_inclusion(self) -> Dict:
        """
        Wait until the deployment is mined (first confirmation)

        Raises:
            TransactionRevertedError: If the constructor reverted
        """
        receipt = await self.provider.wait_for_receipt(self.transaction_hash)
        self._accept_receipt(receipt)
        return receipt

    async def wait_for_confirmations(self, confirmations: int) -> Dict:
        """Wait until the deployment has `confirmations` confirmations"""
        receipt = await self.provider.wait_for_confirmations(self.transaction_hash, confirmations)
        self._accept_receipt(receipt)
        return receipt

    def _accept_receipt(self, receipt: Dict):
        if receipt.get('status') != 1:
            raise TransactionRevertedError(self.transaction_hash)

        if not receipt.get('contractAddress'):
            raise TransactionRevertedError(
                self.transaction_hash,
                f"Receipt for {self.transaction_hash} has no contract address"
            )

        self.receipt = receipt
        self.address = AsyncWeb3.to_checksum_address(receipt['contractAddress'])
        self._contract = self.w3.eth.contract(address=self.address, abi=self.abi)

    async def call(self, function_name: str):
        """Call a read-only contract function"""
        if self._contract is None:
            raise RuntimeError("Contract is not mined yet; call wait_for_inclusion() first")

        function = getattr(self._contract.functions, function_name)
        return await function().call()

    async def read_metadata(self) -> ContractMetadata:
        """Read every metadata accessor, one call at a time"""
        values = {}

        for function_name in METADATA_FUNCTIONS:
            values[function_name.lower()] = await self.call(function_name)

        return ContractMetadata(**values)


class ContractFactory:
    """
    Builds and sends deployment transactions for one compiled contract
    """

    def __init__(self, w3: AsyncWeb3, provider, abi: List[Dict], bytecode: str):
        """
        Initialize factory

        Args:
            w3: AsyncWeb3 instance
            provider: Provider for receipts
            abi: Contract ABI
            bytecode: Creation bytecode
        """
        self.w3 = w3
        self.provider = provider
        self.abi = abi
        self.bytecode = bytecode
        self._contract = w3.eth.contract(abi=abi, bytecode=bytecode)

    @classmethod
    def from_artifact(cls, w3: AsyncWeb3, provider, artifact_path: str) -> "ContractFactory":
        artifact = load_artifact(artifact_path)
        logger.debug(f"Loaded {artifact.get('contractName', 'contract')} artifact from {artifact_path}")
        return cls(w3, provider, artifact['abi'], artifact['bytecode'])

    def get_deploy_transaction(self, *args, sender: Optional[str] = None) -> Dict:
        """
        Unsigned deployment transaction for the given constructor arguments

        Args:
            *args: Constructor arguments
            sender: Deployer address (used for gas estimation)

        Returns:
            Transaction dict with `data` (and `from` if sender given)
        """
        constructor = self._contract.constructor(*args)
        tx = {'data': constructor.data_in_transaction}

        if sender:
            tx['from'] = sender

        return tx

    async def deploy(
        self,
        signer,
        *args,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None
    ) -> DeployedContract:
        """
        Sign and broadcast the deployment

        Args:
            signer: Signer paying for the deployment
            *args: Constructor arguments
            gas: Gas limit (None = node estimate)
            gas_price: Gas price in wei (None = node default)

        Returns:
            Pending DeployedContract
        """
        tx = self.get_deploy_transaction(*args, sender=signer.address)

        if gas is not None:
            tx['gas'] = gas
        if gas_price is not None:
            tx['gasPrice'] = gas_price

        tx_hash = await signer.send_transaction(tx)
        logger.debug(f"Deployment transaction sent: {tx_hash}")

        return DeployedContract(self.w3, self.provider, self.abi, tx_hash)
