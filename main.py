"""
CertiProof NFT - Deployment Entry Point
Deploys CertiProofNFT to the selected network and records the deployment

Usage:
    python main.py --network localhost
    python main.py --network polygon
"""

import argparse
import asyncio
import os
import sys
from loguru import logger

from blockchain.contract_manager import ContractFactory
from blockchain.provider import Web3Provider
from blockchain.signer import build_signer
from deployer.config import DEFAULT_CONFIG_PATH, build_settings, get_private_key
from deployer.orchestrator import DeploymentOrchestrator, DeploymentResult
from utils.logger import setup_logging


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Deploy the CertiProofNFT contract")
    parser.add_argument(
        '--network',
        default=os.getenv('DEPLOY_NETWORK', 'localhost'),
        help="Network key from the config file (default: $DEPLOY_NETWORK or localhost)"
    )
    parser.add_argument(
        '--config',
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to deployment config (default: {DEFAULT_CONFIG_PATH})"
    )
    return parser.parse_args(argv)


async def deploy(network_name: str, config_path: str = DEFAULT_CONFIG_PATH) -> DeploymentResult:
    """
    Wire up provider, signer and factory, then run the orchestrator

    Args:
        network_name: Network key from the config file
        config_path: Path to JSON config

    Returns:
        DeploymentResult
    """
    settings = build_settings(network_name, config_path)
    network = settings.network

    provider = Web3Provider.from_url(
        network.rpc_url,
        network.name,
        timeout=network.timeout,
        poll_latency=network.poll_latency
    )

    try:
        signer = await build_signer(
            provider.w3,
            get_private_key(),
            allow_node_accounts=network.local
        )

        factory = ContractFactory.from_artifact(provider.w3, provider, settings.contract.artifact_path)

        orchestrator = DeploymentOrchestrator(provider, signer, factory, settings)
        return await orchestrator.run()
    finally:
        await provider.disconnect()


def main(argv=None) -> int:
    """Run a deployment; returns the process exit code"""
    args = parse_args(argv)
    setup_logging()

    logger.info("=" * 70)
    logger.info("CertiProof NFT Deployment")
    logger.info("=" * 70)

    try:
        asyncio.run(deploy(args.network, args.config))
    except KeyboardInterrupt:
        logger.warning("Deployment interrupted by user")
        return 1
    except Exception as e:
        logger.exception(f"❌ Deployment failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
