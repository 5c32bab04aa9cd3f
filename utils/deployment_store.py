"""
Deployment Store
Deployment records on disk, one JSON file per network and chain
"""

import os
import json
from typing import Optional
from loguru import logger

from deployer.exceptions import DeploymentNotFoundError, InvalidRecordError
from deployer.records import DeploymentRecord


class DeploymentStore:
    """
    Reads and writes deployments/{network}-{chainId}.json

    Writes replace the previous file for the same key. There is no
    locking; one deployment process per network at a time.
    """

    def __init__(self, directory: str = "deployments"):
        """
        Initialize Deployment Store

        Args:
            directory: Deployments directory (created on first save)
        """
        self.directory = directory

    def path_for(self, network: str, chain_id: int) -> str:
        return os.path.join(self.directory, f"{network}-{chain_id}.json")

    def exists(self, network: str, chain_id: int) -> bool:
        return os.path.exists(self.path_for(network, chain_id))

    def save(self, record: DeploymentRecord) -> str:
        """
        Write a record, replacing any existing one

        Returns:
            Path of the written file
        """
        os.makedirs(self.directory, exist_ok=True)

        path = self.path_for(record.network, record.chain_id)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(record.to_dict(), f, indent=2, ensure_ascii=False)
            f.write('\n')

        logger.debug(f"Wrote deployment record {path}")
        return path

    def load(self, network: str, chain_id: Optional[int] = None) -> DeploymentRecord:
        """
        Load a record

        Args:
            network: Network name
            chain_id: Chain ID (None = the single record for this network)

        Raises:
            DeploymentNotFoundError: If no record exists
            InvalidRecordError: If the file is not a valid record
        """
        if chain_id is not None:
            path = self.path_for(network, chain_id)
        else:
            path = self._find_by_network(network)

        if path is None or not os.path.exists(path):
            raise DeploymentNotFoundError(
                f"No deployment record for network '{network}' in {self.directory}"
            )

        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidRecordError(f"Corrupted deployment record {path}: {e}") from e

        return DeploymentRecord.from_dict(data)

    def _find_by_network(self, network: str) -> Optional[str]:
        if not os.path.isdir(self.directory):
            return None

        prefix = f"{network}-"
        matches = []

        for filename in os.listdir(self.directory):
            if not filename.startswith(prefix) or not filename.endswith('.json'):
                continue
            if filename[len(prefix):-len('.json')].isdigit():
                matches.append(filename)

        if len(matches) > 1:
            raise InvalidRecordError(
                f"Several records for network '{network}': {', '.join(sorted(matches))}; "
                "pass the chain ID"
            )

        return os.path.join(self.directory, matches[0]) if matches else None
