"""
Provider
Read access to chain state and transaction receipts over AsyncWeb3
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Optional, Protocol
from web3 import AsyncWeb3, AsyncHTTPProvider
from web3.exceptions import TimeExhausted
from loguru import logger

from deployer.exceptions import ConfirmationTimeoutError, ProviderError


@dataclass(frozen=True)
class NetworkInfo:
    """Network the provider is connected to"""

    name: str
    chain_id: int


class Provider(Protocol):
    """Read-only chain access used by the deployment orchestrator"""

    async def get_network(self) -> NetworkInfo: ...

    async def estimate_gas(self, transaction: Dict) -> int: ...

    async def get_gas_price(self) -> int: ...

    async def get_block_number(self) -> int: ...

    async def wait_for_receipt(self, tx_hash: str) -> Dict: ...

    async def wait_for_confirmations(self, tx_hash: str, confirmations: int) -> Dict: ...


class Web3Provider:
    """
    Provider backed by an AsyncWeb3 instance

    All waiting is bounded by `timeout`; the orchestrator itself
    never applies a timeout.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        network_name: str,
        timeout: float = 300,
        poll_latency: float = 2.0
    ):
        """
        Initialize Provider

        Args:
            w3: AsyncWeb3 instance
            network_name: Configured network key (e.g. 'polygon')
            timeout: Seconds to wait for inclusion and for confirmations
            poll_latency: Seconds between block polls
        """
        self.w3 = w3
        self.network_name = network_name
        self.timeout = timeout
        self.poll_latency = poll_latency
        self._network: Optional[NetworkInfo] = None

    @classmethod
    def from_url(
        cls,
        rpc_url: str,
        network_name: str,
        timeout: float = 300,
        poll_latency: float = 2.0
    ) -> "Web3Provider":
        """Create provider for an HTTP RPC endpoint"""
        w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        return cls(w3, network_name, timeout=timeout, poll_latency=poll_latency)

    async def is_connected(self) -> bool:
        return await self.w3.is_connected()

    async def disconnect(self):
        """Close the HTTP session held by the underlying provider"""
        await self.w3.provider.disconnect()

    async def get_network(self) -> NetworkInfo:
        """Network name and chain ID (chain ID fetched once)"""
        if self._network is None:
            try:
                chain_id = await self.w3.eth.chain_id
            except Exception as e:
                raise ProviderError(
                    f"Unable to reach RPC for network '{self.network_name}': {e}"
                ) from e

            self._network = NetworkInfo(name=self.network_name, chain_id=int(chain_id))

        return self._network

    async def estimate_gas(self, transaction: Dict) -> int:
        return int(await self.w3.eth.estimate_gas(transaction))

    async def get_gas_price(self) -> int:
        return int(await self.w3.eth.gas_price)

    async def get_block_number(self) -> int:
        return int(await self.w3.eth.block_number)

    async def wait_for_receipt(self, tx_hash: str) -> Dict:
        """
        Wait until the transaction is mined

        Raises:
            ConfirmationTimeoutError: If not mined within timeout
        """
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.timeout,
                poll_latency=self.poll_latency
            )
        except TimeExhausted as e:
            raise ConfirmationTimeoutError(
                f"Transaction {tx_hash} not mined after {self.timeout}s"
            ) from e

        return dict(receipt)

    async def wait_for_confirmations(self, tx_hash: str, confirmations: int) -> Dict:
        """
        Wait until the transaction has the given number of confirmations

        The block containing the transaction counts as the first confirmation.

        Returns:
            Transaction receipt

        Raises:
            ConfirmationTimeoutError: If depth not reached within timeout
        """
        receipt = await self.wait_for_receipt(tx_hash)
        target_block = receipt['blockNumber'] + confirmations - 1

        try:
            await asyncio.wait_for(
                self._wait_for_block(target_block),
                timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise ConfirmationTimeoutError(
                f"Transaction {tx_hash} did not reach {confirmations} confirmations "
                f"after {self.timeout}s"
            ) from e

        return receipt

    async def _wait_for_block(self, target_block: int):
        """Poll until the chain head reaches target_block"""
        while True:
            current = await self.get_block_number()

            if current >= target_block:
                return current

            logger.debug(f"Block {current}, waiting for {target_block}")
            await asyncio.sleep(self.poll_latency)
