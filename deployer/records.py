"""
Deployment Records
Schema of the JSON file written after a successful deployment
"""

import re
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from web3 import Web3

from .exceptions import InvalidRecordError


TX_HASH_PATTERN = re.compile(r'^0x[0-9a-fA-F]{64}$')

# Python field name -> key in the JSON file
JSON_KEYS = {
    'network': 'network',
    'chain_id': 'chainId',
    'contract_address': 'contractAddress',
    'deployer_address': 'deployerAddress',
    'transaction_hash': 'transactionHash',
    'block_number': 'blockNumber',
    'gas_used': 'gasUsed',
    'gas_price': 'gasPrice',
    'timestamp': 'timestamp',
    'contract_name': 'contractName',
    'contract_symbol': 'contractSymbol',
    'version': 'version',
    'author': 'author',
    'contact': 'contact',
    'verified': 'verified',
    'verified_at': 'verifiedAt',
}


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-01T12:00:00.000Z"""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.') + \
        f"{moment.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class DeploymentRecord:
    """Outcome of one contract deployment on one network"""

    network: str
    chain_id: int
    contract_address: str
    deployer_address: str
    transaction_hash: str
    block_number: int
    gas_used: int  # Units of gas consumed by the deployment
    gas_price: int  # Wei per gas unit
    timestamp: str
    contract_name: str
    contract_symbol: str
    version: str
    author: str
    contact: str

    # Set by the verification script
    verified: Optional[bool] = None
    verified_at: Optional[str] = None

    def __post_init__(self):
        for name in ('network', 'timestamp', 'contract_name', 'contract_symbol',
                     'version', 'author', 'contact'):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidRecordError(f"{name} must be a non-empty string")

        for name in ('contract_address', 'deployer_address'):
            value = getattr(self, name)
            if not isinstance(value, str) or not Web3.is_address(value):
                raise InvalidRecordError(f"{name} is not a valid address: {value!r}")

        if not isinstance(self.transaction_hash, str) or \
                not TX_HASH_PATTERN.match(self.transaction_hash):
            raise InvalidRecordError(
                f"transaction_hash is not a transaction hash: {self.transaction_hash!r}"
            )

        for name in ('chain_id', 'block_number', 'gas_used', 'gas_price'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidRecordError(f"{name} must be a non-negative integer, got {value!r}")

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to the on-disk layout

        Gas values are written as decimal strings so wei amounts survive
        JSON readers that parse numbers as doubles.
        """
        data: Dict[str, Any] = {}

        for field in fields(self):
            value = getattr(self, field.name)

            if field.name in ('verified', 'verified_at') and value is None:
                continue
            if field.name in ('gas_used', 'gas_price'):
                value = str(value)

            data[JSON_KEYS[field.name]] = value

        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploymentRecord":
        """
        Parse a record read from disk

        Raises:
            InvalidRecordError: If a required key is missing or a value is invalid
        """
        kwargs = {}

        for field in fields(cls):
            key = JSON_KEYS[field.name]
            if key not in data:
                if field.name in ('verified', 'verified_at'):
                    continue
                raise InvalidRecordError(f"Deployment record is missing '{key}'")
            kwargs[field.name] = data[key]

        for name in ('chain_id', 'block_number', 'gas_used', 'gas_price'):
            kwargs[name] = _parse_int(JSON_KEYS[name], kwargs[name])

        return cls(**kwargs)


def _parse_int(key: str, value: Any) -> int:
    """Integers and decimal strings only; floats and booleans are rejected"""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise InvalidRecordError(f"Invalid numeric value for '{key}': {value!r}")

    try:
        return int(value)
    except ValueError as e:
        raise InvalidRecordError(f"Invalid numeric value for '{key}': {value!r}") from e
