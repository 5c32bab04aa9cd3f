"""
Deployment Orchestrator
Drives one CertiProofNFT deployment from gas estimate to deployment record
"""

from dataclasses import dataclass
from typing import Optional, Set, Tuple, TYPE_CHECKING
from loguru import logger

from utils.deployment_store import DeploymentStore
from utils.explorer import env_var_line, explorer_address_url, explorer_tx_url, verification_command
from utils.gas_calculator import CostEstimate, GasCalculator, format_ether, format_gwei

from .config import DeploySettings
from .confirmations import ConfirmationPolicy
from .exceptions import (
    DeploymentError,
    MetadataMismatchError,
    NetworkMismatchError,
    SignerNotConfiguredError,
)
from .records import DeploymentRecord, utc_timestamp

if TYPE_CHECKING:
    from blockchain.contract_manager import ContractFactory, ContractMetadata, DeployedContract
    from blockchain.provider import NetworkInfo, Provider
    from blockchain.signer import Signer


@dataclass(frozen=True)
class DeploymentResult:
    """What a successful run produced"""

    record: DeploymentRecord
    contract: "DeployedContract"
    metadata: "ContractMetadata"
    record_path: str
    confirmations: int
    verification_command: Optional[str] = None


class DeploymentOrchestrator:
    """
    Runs the deployment as a fixed sequence of steps:
    network -> estimate -> deploy -> inclusion -> confirmations ->
    read back -> persist -> report

    Every collaborator is passed in. Any failure propagates to the caller
    unchanged; nothing is retried and nothing is persisted on failure.
    An orchestrator deploys at most once per network and chain.
    """

    def __init__(
        self,
        provider: "Provider",
        signer: Optional["Signer"],
        factory: "ContractFactory",
        settings: DeploySettings,
        store: Optional[DeploymentStore] = None,
        policy: Optional[ConfirmationPolicy] = None,
        gas_calculator: Optional[GasCalculator] = None
    ):
        """
        Initialize Deployment Orchestrator

        Args:
            provider: Chain read access
            signer: Account paying for the deployment
            factory: Contract factory for CertiProofNFT
            settings: Contract and network settings
            store: Record store (default: settings.deployments_dir)
            policy: Confirmation policy (default: from settings)
            gas_calculator: Gas estimation (default: from network settings)
        """
        self.provider = provider
        self.signer = signer
        self.factory = factory
        self.settings = settings
        self.store = store or DeploymentStore(settings.deployments_dir)
        self.policy = policy or settings.confirmation_policy()
        self.gas_calculator = gas_calculator or GasCalculator(
            provider,
            gas_price_gwei=settings.network.gas_price_gwei,
            gas_limit=settings.network.gas_limit,
            gas_limit_multiplier=settings.gas_limit_multiplier
        )

        self._claimed: Set[Tuple[str, int]] = set()
        self._persisted: Set[Tuple[str, int]] = set()

    async def run(self) -> DeploymentResult:
        """
        Deploy the contract and write its deployment record

        Returns:
            DeploymentResult
        """
        contract_settings = self.settings.contract

        logger.info("🚀 Starting CertiProofNFT deployment...")

        network, deployer_address, balance = await self.resolve_network_and_signer()
        self._claim(network)

        constructor_args = (contract_settings.name, contract_settings.symbol, deployer_address)

        logger.info("📝 Contract Parameters:")
        logger.info(f"   Name: {contract_settings.name}")
        logger.info(f"   Symbol: {contract_settings.symbol}")
        logger.info(f"   Owner: {deployer_address}")

        estimate = await self.estimate_cost(constructor_args, deployer_address, balance)

        contract = await self.deploy(constructor_args, estimate)

        await self.await_inclusion(contract)

        confirmations = self.policy.required_confirmations(network.chain_id)
        receipt = await self.await_confirmations(contract, confirmations)

        metadata = await self.verify(contract, constructor_args)

        record = self.build_record(network, deployer_address, contract, receipt, estimate)
        record_path = self.persist(record)

        command = self.report(record)

        logger.success("🎉 Deployment completed successfully!")

        return DeploymentResult(
            record=record,
            contract=contract,
            metadata=metadata,
            record_path=record_path,
            confirmations=confirmations,
            verification_command=command
        )

    async def resolve_network_and_signer(self) -> Tuple["NetworkInfo", str, int]:
        """Step 1: connected network, deployer address and balance"""
        network = await self.provider.get_network()
        logger.info(f"📡 Network: {network.name} (Chain ID: {network.chain_id})")

        expected_chain_id = self.settings.network.chain_id
        if expected_chain_id is not None and expected_chain_id != network.chain_id:
            raise NetworkMismatchError(
                f"Network '{network.name}' is configured for chain {expected_chain_id} "
                f"but the RPC endpoint reports chain {network.chain_id}"
            )

        if self.signer is None:
            raise SignerNotConfiguredError("No signer configured for deployment")

        deployer_address = self.signer.address
        balance = await self.signer.get_balance()

        logger.info(f"👤 Deployer: {deployer_address}")
        logger.info(f"💰 Balance: {format_ether(balance)} ETH")

        return network, deployer_address, balance

    async def estimate_cost(
        self,
        constructor_args: Tuple,
        deployer_address: str,
        balance: int
    ) -> CostEstimate:
        """Step 2: gas units x gas price for the deployment transaction"""
        tx = self.factory.get_deploy_transaction(*constructor_args, sender=deployer_address)
        estimate = await self.gas_calculator.estimate(tx)

        logger.info(f"⛽ Estimated Gas: {estimate.gas}")
        logger.info(f"⛽ Gas Price: {format_gwei(estimate.gas_price)} gwei")
        logger.info(f"💸 Estimated Cost: {format_ether(estimate.cost_wei)} ETH")

        if balance < estimate.cost_wei:
            logger.warning(
                f"Balance {format_ether(balance)} ETH is below the estimated cost "
                f"{format_ether(estimate.cost_wei)} ETH"
            )

        return estimate

    async def deploy(self, constructor_args: Tuple, estimate: CostEstimate) -> "DeployedContract":
        """Step 3: sign and broadcast the deployment"""
        logger.info("🔨 Deploying CertiProofNFT contract...")

        contract = await self.factory.deploy(
            self.signer,
            *constructor_args,
            gas=self.gas_calculator.gas_limit_for(estimate),
            gas_price=estimate.gas_price
        )

        logger.info(f"🔗 Transaction hash: {contract.transaction_hash}")
        return contract

    async def await_inclusion(self, contract: "DeployedContract"):
        """Step 4: wait for the deployment to be mined"""
        receipt = await contract.wait_for_inclusion()

        logger.success(f"✅ Contract deployed to: {contract.address}")
        logger.info(f"   Block: {receipt['blockNumber']}")
        return receipt

    async def await_confirmations(self, contract: "DeployedContract", confirmations: int):
        """Step 5: wait for the required depth"""
        logger.info(f"⏳ Waiting for {confirmations} confirmations...")

        receipt = await contract.wait_for_confirmations(confirmations)

        logger.success(f"✅ Confirmed with {confirmations} confirmations")
        return receipt

    async def verify(self, contract: "DeployedContract", constructor_args: Tuple) -> "ContractMetadata":
        """
        Step 6: read back contract metadata

        Name, symbol and owner are compared with the constructor arguments.
        Mismatches are warnings unless strict verification is enabled.
        """
        metadata = await contract.read_metadata()

        logger.info("🔍 Contract Verification:")
        logger.info(f"   Version: {metadata.version}")
        logger.info(f"   Author: {metadata.author}")
        logger.info(f"   Contact: {metadata.contact}")
        logger.info(f"   Wallet: {metadata.wallet}")
        logger.info(f"   Owner: {metadata.owner}")
        logger.info(f"   Name: {metadata.name}")
        logger.info(f"   Symbol: {metadata.symbol}")

        name, symbol, owner = constructor_args
        mismatches = []

        if metadata.name != name:
            mismatches.append(f"name {metadata.name!r} != {name!r}")
        if metadata.symbol != symbol:
            mismatches.append(f"symbol {metadata.symbol!r} != {symbol!r}")
        if str(metadata.owner).lower() != owner.lower():
            mismatches.append(f"owner {metadata.owner} != {owner}")

        if mismatches:
            message = "Read-back metadata differs from constructor arguments: " + "; ".join(mismatches)

            if self.settings.strict_verification:
                raise MetadataMismatchError(message)

            logger.warning(message)

        return metadata

    def build_record(
        self,
        network: "NetworkInfo",
        deployer_address: str,
        contract: "DeployedContract",
        receipt,
        estimate: CostEstimate
    ) -> DeploymentRecord:
        """Assemble the validated record"""
        contract_settings = self.settings.contract

        return DeploymentRecord(
            network=network.name,
            chain_id=network.chain_id,
            contract_address=contract.address,
            deployer_address=deployer_address,
            transaction_hash=contract.transaction_hash,
            block_number=int(receipt['blockNumber']),
            gas_used=int(receipt['gasUsed']),
            gas_price=int(receipt.get('effectiveGasPrice') or estimate.gas_price),
            timestamp=utc_timestamp(),
            contract_name=contract_settings.name,
            contract_symbol=contract_settings.symbol,
            version=contract_settings.version,
            author=contract_settings.author,
            contact=contract_settings.contact
        )

    def _claim(self, network: "NetworkInfo"):
        key = (network.name, network.chain_id)

        if key in self._claimed:
            raise DeploymentError(
                f"Already deployed to {network.name}-{network.chain_id} with this orchestrator"
            )

        self._claimed.add(key)

    def persist(self, record: DeploymentRecord) -> str:
        """Step 7: write the record (once per network and chain)"""
        key = (record.network, record.chain_id)

        if key in self._persisted:
            raise DeploymentError(
                f"Deployment record for {record.network}-{record.chain_id} already written in this run"
            )

        if self.store.exists(record.network, record.chain_id):
            logger.warning(
                f"Replacing previous deployment record for {record.network}-{record.chain_id}"
            )

        path = self.store.save(record)
        self._persisted.add(key)

        logger.info(f"💾 Deployment info saved to: {path}")
        return path

    def report(self, record: DeploymentRecord) -> Optional[str]:
        """Step 8: env var suggestion, verification command and explorer links"""
        logger.info("📋 Environment Variables:")
        logger.info(env_var_line(record))

        command = verification_command(record)

        if command:
            logger.info("🔍 To verify the contract on block explorer, run:")
            logger.info(command)

            explorer_url = self.settings.network.explorer_url
            address_url = explorer_address_url(record.chain_id, record.contract_address, explorer_url)
            if address_url:
                logger.info(f"🔗 Explorer: {address_url}")
                logger.info(
                    f"🔗 Transaction: {explorer_tx_url(record.chain_id, record.transaction_hash, explorer_url)}"
                )

        return command
