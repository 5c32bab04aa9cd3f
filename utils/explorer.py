"""
Explorer
Follow-up hints printed after a deployment: env var, verify command, explorer links
"""

from typing import Optional

from deployer.records import DeploymentRecord


LOCAL_CHAIN_ID = 31337

EXPLORER_URLS = {
    1: "https://etherscan.io",
    5: "https://goerli.etherscan.io",
    137: "https://polygonscan.com",
    80001: "https://mumbai.polygonscan.com",
}


def is_local_chain(chain_id: int) -> bool:
    return chain_id == LOCAL_CHAIN_ID


def env_var_line(record: DeploymentRecord) -> str:
    """e.g. CERTIPROOF_NFT_POLYGON=0x..."""
    network = record.network.upper().replace('-', '_')
    return f"CERTIPROOF_NFT_{network}={record.contract_address}"


def verification_command(record: DeploymentRecord) -> Optional[str]:
    """
    Hardhat command that verifies the contract source on the block explorer

    Returns None for the local chain.
    """
    if is_local_chain(record.chain_id):
        return None

    return (
        f"npx hardhat verify --network {record.network} {record.contract_address} "
        f"\"{record.contract_name}\" \"{record.contract_symbol}\" \"{record.deployer_address}\""
    )


def explorer_address_url(
    chain_id: int,
    address: str,
    explorer_url: Optional[str] = None
) -> Optional[str]:
    """Block explorer page for an address (None if the chain has no known explorer)"""
    base_url = explorer_url or EXPLORER_URLS.get(chain_id)

    if not base_url:
        return None

    return f"{base_url.rstrip('/')}/address/{address}"


def explorer_tx_url(
    chain_id: int,
    tx_hash: str,
    explorer_url: Optional[str] = None
) -> Optional[str]:
    """Block explorer page for a transaction"""
    base_url = explorer_url or EXPLORER_URLS.get(chain_id)

    if not base_url:
        return None

    return f"{base_url.rstrip('/')}/tx/{tx_hash}"
