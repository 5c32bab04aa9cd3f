"""
Deployment Configuration
Loads config/deploy_config.json and resolves secrets from the environment
"""

import os
import json
from dataclasses import dataclass, field
from typing import Dict, Optional
from loguru import logger
from dotenv import load_dotenv

from .confirmations import ConfirmationPolicy
from .exceptions import ConfigError, UnknownNetworkError

load_dotenv()


DEFAULT_CONFIG_PATH = "config/deploy_config.json"
LOCAL_CHAIN_ID = 31337


@dataclass(frozen=True)
class ContractSettings:
    """Constructor arguments and metadata for the deployed contract"""

    artifact_path: str
    name: str
    symbol: str
    version: str
    author: str
    contact: str


@dataclass(frozen=True)
class NetworkSettings:
    """Connection and gas settings for one network"""

    name: str
    rpc_url: str
    chain_id: Optional[int] = None
    gas_price_gwei: Optional[float] = None
    gas_limit: Optional[int] = None
    timeout: float = 300
    poll_latency: float = 2.0
    explorer_url: Optional[str] = None
    local: bool = False


@dataclass(frozen=True)
class DeploySettings:
    """Everything a deployment run needs besides the provider and signer"""

    contract: ContractSettings
    network: NetworkSettings
    deployments_dir: str = "deployments"
    gas_limit_multiplier: float = 1.2
    strict_verification: bool = False
    hardhat_project_dir: str = "."
    confirmations: Dict = field(default_factory=dict)

    def confirmation_policy(self) -> ConfirmationPolicy:
        return ConfirmationPolicy.from_config(self.confirmations)


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict:
    """Load raw JSON configuration"""
    if not os.path.exists(config_path):
        raise ConfigError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e


def resolve_rpc_url(network_name: str, network_config: Dict) -> str:
    """
    Resolve the RPC URL for a network

    The variable named by `rpc_url_env` wins; otherwise `rpc_url` is used
    with ${VAR} references expanded from the environment.

    Raises:
        ConfigError: If no URL can be resolved
    """
    env_name = network_config.get('rpc_url_env')
    if env_name and os.getenv(env_name):
        return os.getenv(env_name)

    template = network_config.get('rpc_url')
    if not template:
        raise ConfigError(
            f"No RPC URL for network '{network_name}': set {env_name or 'rpc_url'}"
        )

    url = os.path.expandvars(template)
    if '$' in url:
        raise ConfigError(
            f"Unresolved environment variable in RPC URL for '{network_name}': {template}"
        )

    return url


def build_network_settings(network_name: str, config: Dict) -> NetworkSettings:
    """Build settings for the network selected on the command line"""
    networks = config.get('networks', {})

    if network_name not in networks:
        raise UnknownNetworkError(
            f"Network '{network_name}' not configured "
            f"(available: {', '.join(sorted(networks)) or 'none'})"
        )

    network_config = networks[network_name]
    chain_id = network_config.get('chain_id')

    return NetworkSettings(
        name=network_name,
        rpc_url=resolve_rpc_url(network_name, network_config),
        chain_id=int(chain_id) if chain_id is not None else None,
        gas_price_gwei=network_config.get('gas_price_gwei'),
        gas_limit=network_config.get('gas_limit'),
        timeout=float(network_config.get('timeout', 300)),
        poll_latency=float(network_config.get('poll_latency', 2.0)),
        explorer_url=network_config.get('explorer_url'),
        local=bool(network_config.get('local', chain_id == LOCAL_CHAIN_ID))
    )


def build_settings(network_name: str, config_path: str = DEFAULT_CONFIG_PATH) -> DeploySettings:
    """
    Load configuration and build settings for one network

    Args:
        network_name: Key under `networks` in the config file
        config_path: Path to JSON config

    Returns:
        DeploySettings
    """
    config = load_config(config_path)

    try:
        contract_config = config['contract']
        contract = ContractSettings(
            artifact_path=contract_config['artifact_path'],
            name=contract_config['name'],
            symbol=contract_config['symbol'],
            version=contract_config['version'],
            author=contract_config['author'],
            contact=contract_config['contact']
        )
    except KeyError as e:
        raise ConfigError(f"Missing contract setting in {config_path}: {e}") from e

    network = build_network_settings(network_name, config)

    settings = DeploySettings(
        contract=contract,
        network=network,
        deployments_dir=config.get('deployments_dir', 'deployments'),
        gas_limit_multiplier=float(config.get('gas', {}).get('gas_limit_multiplier', 1.2)),
        strict_verification=bool(config.get('strict_verification', False)),
        hardhat_project_dir=config.get('hardhat_project_dir', '.'),
        confirmations=config.get('confirmations', {})
    )

    logger.debug(f"Loaded settings for network '{network_name}' from {config_path}")
    return settings


def get_private_key() -> Optional[str]:
    """Deployer private key from environment (None if unset)"""
    return os.getenv('DEPLOYER_PRIVATE_KEY') or None
