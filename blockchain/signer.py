"""
Signer
Accounts that authorize the deployment transaction
"""

from typing import Dict, Optional, Protocol
from web3 import AsyncWeb3
from eth_account import Account
from eth_account.signers.local import LocalAccount
from loguru import logger

from deployer.exceptions import SignerNotConfiguredError


class Signer(Protocol):
    """Account capable of sending transactions"""

    address: str

    async def get_balance(self) -> int: ...

    async def send_transaction(self, transaction: Dict) -> str: ...


class LocalAccountSigner:
    """
    Signs locally with a private key and broadcasts raw transactions
    """

    def __init__(self, w3: AsyncWeb3, account: LocalAccount):
        """
        Initialize Signer

        Args:
            w3: AsyncWeb3 instance
            account: eth_account LocalAccount
        """
        self.w3 = w3
        self.account = account
        self.address = account.address

    @classmethod
    def from_key(cls, w3: AsyncWeb3, private_key: str) -> "LocalAccountSigner":
        try:
            account = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            raise SignerNotConfiguredError(f"Invalid deployer private key: {e}") from e

        return cls(w3, account)

    async def get_balance(self) -> int:
        return int(await self.w3.eth.get_balance(self.address))

    async def send_transaction(self, transaction: Dict) -> str:
        """
        Sign and broadcast a transaction

        Fills in nonce, chainId, gas and gasPrice when absent.

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        tx = dict(transaction)
        tx['from'] = self.address

        if 'nonce' not in tx:
            tx['nonce'] = await self.w3.eth.get_transaction_count(self.address, 'pending')
        if 'chainId' not in tx:
            tx['chainId'] = await self.w3.eth.chain_id
        if 'gas' not in tx:
            tx['gas'] = await self.w3.eth.estimate_gas(tx)
        if 'gasPrice' not in tx and 'maxFeePerGas' not in tx:
            tx['gasPrice'] = await self.w3.eth.gas_price

        signed_tx = self.account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)

        return AsyncWeb3.to_hex(tx_hash)


class NodeAccountSigner:
    """
    Uses an account unlocked on the node itself (Hardhat / Anvil dev nodes)
    """

    def __init__(self, w3: AsyncWeb3, address: str):
        self.w3 = w3
        self.address = AsyncWeb3.to_checksum_address(address)

    async def get_balance(self) -> int:
        return int(await self.w3.eth.get_balance(self.address))

    async def send_transaction(self, transaction: Dict) -> str:
        tx = dict(transaction)
        tx['from'] = self.address

        tx_hash = await self.w3.eth.send_transaction(tx)
        return AsyncWeb3.to_hex(tx_hash)


async def build_signer(
    w3: AsyncWeb3,
    private_key: Optional[str],
    allow_node_accounts: bool = False
) -> Signer:
    """
    Choose the deployment signer

    Args:
        w3: AsyncWeb3 instance
        private_key: Deployer key (None if not configured)
        allow_node_accounts: Fall back to the node's first unlocked account

    Returns:
        Signer

    Raises:
        SignerNotConfiguredError: If no key is set and no node account is usable
    """
    if private_key:
        signer = LocalAccountSigner.from_key(w3, private_key)
        logger.debug(f"Using private key signer {signer.address}")
        return signer

    if allow_node_accounts:
        accounts = await w3.eth.accounts
        if accounts:
            logger.debug(f"Using node account {accounts[0]}")
            return NodeAccountSigner(w3, accounts[0])

    raise SignerNotConfiguredError(
        "No deployer account: set DEPLOYER_PRIVATE_KEY in .env"
    )
