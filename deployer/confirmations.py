"""
Confirmation Policy
Number of block confirmations to wait for, per chain
"""

from typing import Dict, Mapping, Optional
from loguru import logger


# Ethereum mainnet and Polygon mainnet carry real value
DEFAULT_CONFIRMATION_OVERRIDES = {
    1: 5,
    137: 5,
}
DEFAULT_CONFIRMATIONS = 2


class ConfirmationPolicy:
    """
    Maps chain IDs to the confirmations required before a deployment
    is considered final. Chains not in the table use the default.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[int, int]] = None,
        default: int = DEFAULT_CONFIRMATIONS
    ):
        """
        Initialize Confirmation Policy

        Args:
            overrides: Chain ID -> confirmations (None = built-in table)
            default: Confirmations for chains not in the table
        """
        if overrides is None:
            overrides = DEFAULT_CONFIRMATION_OVERRIDES

        if default < 1:
            raise ValueError(f"Default confirmations must be at least 1, got {default}")

        self.default = default
        self.table: Dict[int, int] = {}

        for chain_id, confirmations in overrides.items():
            if int(confirmations) < 1:
                raise ValueError(
                    f"Confirmations for chain {chain_id} must be at least 1, got {confirmations}"
                )
            self.table[int(chain_id)] = int(confirmations)

    @classmethod
    def from_config(cls, config: Optional[Dict]) -> "ConfirmationPolicy":
        """
        Build policy from the `confirmations` config section

        JSON object keys are strings, so chain IDs are converted here.
        """
        if not config:
            return cls()

        overrides = config.get('overrides')
        if overrides is not None:
            overrides = {int(chain_id): n for chain_id, n in overrides.items()}

        return cls(
            overrides=overrides,
            default=int(config.get('default', DEFAULT_CONFIRMATIONS))
        )

    def required_confirmations(self, chain_id: int) -> int:
        """Get required confirmations for a chain"""
        confirmations = self.table.get(int(chain_id), self.default)
        logger.debug(f"Chain {chain_id} requires {confirmations} confirmations")
        return confirmations
