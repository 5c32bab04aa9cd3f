"""
Gas Calculator
Deployment cost estimation and gas price selection
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional
from web3 import Web3
from loguru import logger


@dataclass(frozen=True)
class CostEstimate:
    """Estimated cost of a transaction"""

    gas: int
    gas_price: int  # wei

    @property
    def cost_wei(self) -> int:
        return self.gas * self.gas_price


def format_ether(amount_wei: int) -> str:
    """Format a wei amount as ether without trailing zeros"""
    value = Web3.from_wei(amount_wei, 'ether')
    text = format(value, 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text or '0'


def format_gwei(amount_wei: int) -> str:
    """Format a wei amount as gwei"""
    value = Web3.from_wei(amount_wei, 'gwei')
    text = format(value, 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text or '0'


class GasCalculator:
    """
    Estimates deployment gas and picks the gas price to pay
    """

    def __init__(
        self,
        provider,
        gas_price_gwei: Optional[float] = None,
        gas_limit: Optional[int] = None,
        gas_limit_multiplier: float = 1.2
    ):
        """
        Initialize Gas Calculator

        Args:
            provider: Provider for estimates and network gas price
            gas_price_gwei: Fixed gas price for this network (None = network price)
            gas_limit: Fixed gas limit for this network (None = scaled estimate)
            gas_limit_multiplier: Buffer applied to the estimate
        """
        if gas_limit_multiplier < 1:
            raise ValueError(f"Gas limit multiplier must be >= 1, got {gas_limit_multiplier}")

        self.provider = provider
        self.gas_price_gwei = gas_price_gwei
        self.gas_limit = gas_limit
        self.gas_limit_multiplier = gas_limit_multiplier

    async def get_gas_price(self) -> int:
        """Gas price in wei"""
        if self.gas_price_gwei is not None:
            return int(Web3.to_wei(Decimal(str(self.gas_price_gwei)), 'gwei'))

        return await self.provider.get_gas_price()

    async def estimate(self, transaction: Dict) -> CostEstimate:
        """
        Estimate the cost of a transaction

        Raises whatever the provider raises; nothing is retried.
        """
        gas = await self.provider.estimate_gas(transaction)
        gas_price = await self.get_gas_price()

        estimate = CostEstimate(gas=gas, gas_price=gas_price)
        logger.debug(f"Estimate: {gas} gas @ {format_gwei(gas_price)} gwei")

        return estimate

    def gas_limit_for(self, estimate: CostEstimate) -> int:
        """Gas limit to send with the transaction"""
        if self.gas_limit is not None:
            return max(int(self.gas_limit), estimate.gas)

        return int(estimate.gas * self.gas_limit_multiplier)
