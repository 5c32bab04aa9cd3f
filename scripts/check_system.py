"""
System Check Script
Verifies configuration, connection and account before deploying

Usage:
    python -m scripts.check_system --network polygon
"""

import os
import sys
import argparse
import asyncio
from loguru import logger

from blockchain.contract_manager import load_artifact
from blockchain.provider import Web3Provider
from blockchain.signer import build_signer
from deployer.config import DEFAULT_CONFIG_PATH, build_settings, get_private_key
from deployer.exceptions import DeploymentError
from utils.gas_calculator import format_ether
from utils.logger import setup_logging


MIN_BALANCE_WEI = 10 ** 16  # 0.01 ETH


def check_environment_variables(network_local: bool) -> bool:
    """Check that a deployer key is set (optional on local nodes)"""
    logger.info("Checking environment variables...")

    if get_private_key():
        logger.success("  ✓ DEPLOYER_PRIVATE_KEY set")
        return True

    if network_local:
        logger.warning("  DEPLOYER_PRIVATE_KEY not set - using first node account")
        return True

    logger.error("  ✗ DEPLOYER_PRIVATE_KEY not set")
    return False


def check_artifact(artifact_path: str) -> bool:
    """Check that the compiled contract artifact exists"""
    logger.info("Checking contract artifact...")

    try:
        load_artifact(artifact_path)
    except DeploymentError as e:
        logger.error(f"  ✗ {e}")
        return False

    logger.success(f"  ✓ {artifact_path}")
    return True


def check_deployments_dir(deployments_dir: str) -> bool:
    """Check that the deployments directory is writable (or can be created)"""
    logger.info("Checking deployments directory...")

    target = deployments_dir
    while not os.path.exists(target):
        parent = os.path.dirname(os.path.abspath(target))
        if parent == os.path.abspath(target):
            break
        target = parent

    if not os.access(target, os.W_OK):
        logger.error(f"  ✗ {deployments_dir} is not writable")
        return False

    logger.success(f"  ✓ {deployments_dir}")
    return True


async def check_rpc_connection(provider: Web3Provider, expected_chain_id) -> bool:
    """Check RPC endpoint connection and chain ID"""
    logger.info("Checking RPC connection...")

    if not await provider.is_connected():
        logger.error(f"  ✗ {provider.network_name}: Connection failed")
        return False

    network = await provider.get_network()
    block = await provider.get_block_number()

    if expected_chain_id is not None and network.chain_id != expected_chain_id:
        logger.error(
            f"  ✗ {network.name}: chain {network.chain_id}, expected {expected_chain_id}"
        )
        return False

    logger.success(f"  ✓ {network.name}: Connected (Chain ID: {network.chain_id}, Block: {block})")
    return True


async def check_signer_balance(provider: Web3Provider, network_local: bool) -> bool:
    """Check deployer balance"""
    logger.info("Checking deployer balance...")

    signer = await build_signer(provider.w3, get_private_key(), allow_node_accounts=network_local)
    balance = await signer.get_balance()

    logger.info(f"  Deployer: {signer.address}")
    logger.info(f"  Balance: {format_ether(balance)} ETH")

    if balance < MIN_BALANCE_WEI:
        logger.warning(f"  ⚠ Balance low (need at least {format_ether(MIN_BALANCE_WEI)} ETH)")
        return False

    logger.success("  ✓ Balance sufficient")
    return True


async def run_checks(network_name: str, config_path: str = DEFAULT_CONFIG_PATH):
    """
    Run all checks

    Returns:
        List of (check name, passed)
    """
    settings = build_settings(network_name, config_path)
    network = settings.network

    provider = Web3Provider.from_url(
        network.rpc_url,
        network.name,
        timeout=network.timeout,
        poll_latency=network.poll_latency
    )

    checks = [
        ("Environment Variables", lambda: check_environment_variables(network.local)),
        ("Contract Artifact", lambda: check_artifact(settings.contract.artifact_path)),
        ("Deployments Directory", lambda: check_deployments_dir(settings.deployments_dir)),
        ("RPC Connection", lambda: check_rpc_connection(provider, network.chain_id)),
        ("Deployer Balance", lambda: check_signer_balance(provider, network.local))
    ]

    results = []

    try:
        for name, check_func in checks:
            logger.info("")
            try:
                result = check_func()
                if asyncio.iscoroutine(result):
                    result = await result
                results.append((name, result))
            except Exception as e:
                logger.error(f"Error in {name}: {e}")
                results.append((name, False))
    finally:
        await provider.disconnect()

    return results


def main(argv=None) -> int:
    """Run all system checks"""
    parser = argparse.ArgumentParser(description="Pre-flight checks for a CertiProofNFT deployment")
    parser.add_argument('--network', default=os.getenv('DEPLOY_NETWORK', 'localhost'))
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH)
    args = parser.parse_args(argv)

    setup_logging(log_file=None)

    logger.info("=" * 70)
    logger.info("CertiProof Deployment System Check")
    logger.info("=" * 70)

    try:
        results = asyncio.run(run_checks(args.network, args.config))
    except DeploymentError as e:
        logger.error(f"❌ {e}")
        return 1

    # Summary
    logger.info("")
    logger.info("=" * 70)
    logger.info("Summary")
    logger.info("=" * 70)

    passed = sum(1 for _, result in results if result)
    total = len(results)

    for name, result in results:
        status = "✓ PASS" if result else "✗ FAIL"
        logger.info(f"  {status}: {name}")

    logger.info("")
    logger.info(f"Total: {passed}/{total} checks passed")

    if passed == total:
        logger.success("✅ Ready to deploy!")
        logger.info(f"Deploy: python main.py --network {args.network}")
        return 0

    logger.error("❌ Not ready - fix issues above")
    return 1


if __name__ == "__main__":
    sys.exit(main())
