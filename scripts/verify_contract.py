"""
Contract Verification Script
Verifies a recorded CertiProofNFT deployment on the block explorer

Usage:
    python -m scripts.verify_contract --network polygon
"""

import os
import sys
import argparse
import subprocess
from dataclasses import replace
from typing import Callable, List, Optional
from loguru import logger

from deployer.config import DEFAULT_CONFIG_PATH, load_config
from deployer.exceptions import DeploymentError, DeploymentNotFoundError, VerificationError
from deployer.records import DeploymentRecord, utc_timestamp
from utils.deployment_store import DeploymentStore
from utils.explorer import explorer_address_url, is_local_chain
from utils.logger import setup_logging


TROUBLESHOOTING_TIPS = [
    "1. Make sure the contract is deployed and confirmed",
    "2. Check if the constructor arguments are correct",
    "3. Ensure you have the correct API key in your .env file",
    "4. Wait a few minutes after deployment before verifying",
]


def build_verify_command(record: DeploymentRecord) -> List[str]:
    """Hardhat verify invocation with the recorded constructor arguments"""
    return [
        'npx', 'hardhat', 'verify',
        '--network', record.network,
        record.contract_address,
        record.contract_name,
        record.contract_symbol,
        record.deployer_address,
    ]


def run_verification(
    record: DeploymentRecord,
    project_dir: str = ".",
    runner: Callable = subprocess.run
) -> bool:
    """
    Run source verification

    Args:
        record: Deployment to verify
        project_dir: Hardhat project directory
        runner: subprocess.run compatible callable

    Returns:
        True if newly verified, False if it was already verified

    Raises:
        VerificationError: If verification fails or the chain is local
    """
    if is_local_chain(record.chain_id):
        raise VerificationError("Local deployments cannot be verified on a block explorer")

    command = build_verify_command(record)
    logger.debug(f"Running: {' '.join(command)}")

    try:
        result = runner(command, cwd=project_dir, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise VerificationError(f"Unable to run hardhat (is Node.js installed?): {e}") from e

    output = f"{result.stdout or ''}\n{result.stderr or ''}"

    if 'already verified' in output.lower():
        return False

    if result.returncode != 0:
        raise VerificationError(output.strip() or f"hardhat verify exited with {result.returncode}")

    return True


def mark_verified(store: DeploymentStore, record: DeploymentRecord) -> DeploymentRecord:
    """Rewrite the record with verification status"""
    verified_record = replace(record, verified=True, verified_at=utc_timestamp())
    store.save(verified_record)
    return verified_record


def verify(
    network: str,
    chain_id: Optional[int] = None,
    config_path: str = DEFAULT_CONFIG_PATH,
    runner: Callable = subprocess.run
) -> DeploymentRecord:
    """
    Verify the recorded deployment for a network

    Returns:
        Updated record
    """
    config = load_config(config_path)
    store = DeploymentStore(config.get('deployments_dir', 'deployments'))

    record = store.load(network, chain_id)

    logger.info(f"📡 Network: {record.network} (Chain ID: {record.chain_id})")
    logger.info(f"📄 Contract Address: {record.contract_address}")
    logger.info(f"🔨 Deployed at: {record.timestamp}")
    logger.info("📝 Constructor Arguments:")
    logger.info(f"   Name: {record.contract_name}")
    logger.info(f"   Symbol: {record.contract_symbol}")
    logger.info(f"   Owner: {record.deployer_address}")

    logger.info("🚀 Verifying contract...")

    if run_verification(record, config.get('hardhat_project_dir', '.'), runner=runner):
        logger.success("✅ Contract verified successfully!")
    else:
        logger.success("✅ Contract is already verified!")

    record = mark_verified(store, record)

    explorer_url = config.get('networks', {}).get(record.network, {}).get('explorer_url')
    address_url = explorer_address_url(record.chain_id, record.contract_address, explorer_url)
    if address_url:
        logger.info(f"🔗 Block Explorer: {address_url}")

    return record


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Verify a deployed CertiProofNFT contract")
    parser.add_argument('--network', default=os.getenv('DEPLOY_NETWORK', 'localhost'))
    parser.add_argument('--chain-id', type=int, default=None)
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH)
    args = parser.parse_args(argv)

    setup_logging()

    logger.info("🔍 Starting contract verification...")

    try:
        verify(args.network, args.chain_id, args.config)
    except VerificationError as e:
        logger.error(f"❌ Verification failed: {e}")
        logger.info("🔧 Troubleshooting tips:")
        for tip in TROUBLESHOOTING_TIPS:
            logger.info(tip)
        return 1
    except DeploymentNotFoundError as e:
        logger.error(f"❌ {e}")
        logger.info(f"Deploy the contract first: python main.py --network {args.network}")
        return 1
    except DeploymentError as e:
        logger.error(f"❌ {e}")
        return 1

    logger.success("🎉 Verification process completed!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
