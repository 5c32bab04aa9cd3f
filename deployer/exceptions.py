"""
Deployment Exceptions
Error taxonomy for the deployment workflow
"""


class DeploymentError(Exception):
    """Base exception for deployment-related errors"""


class ConfigError(DeploymentError, ValueError):
    """Raised when the deployment configuration is incomplete or invalid"""


class UnknownNetworkError(ConfigError):
    """Raised when the requested network is not in the configuration"""


class ProviderError(DeploymentError):
    """Raised when the RPC provider is unreachable or misbehaves"""


class NetworkMismatchError(ProviderError, ValueError):
    """Raised when the provider reports a different chain than configured"""


class SignerNotConfiguredError(DeploymentError, ValueError):
    """Raised when no account is available to sign the deployment"""


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when the compiled contract artifact is missing"""


class TransactionRevertedError(DeploymentError):
    """Raised when the deployment transaction is mined with status 0"""

    def __init__(self, tx_hash: str, message: str = ""):
        self.tx_hash = tx_hash
        super().__init__(message or f"Deployment transaction reverted: {tx_hash}")


class ConfirmationTimeoutError(DeploymentError, TimeoutError):
    """Raised when a transaction does not reach the required depth in time"""


class InvalidRecordError(DeploymentError, ValueError):
    """Raised when a deployment record fails validation"""


class MetadataMismatchError(DeploymentError, ValueError):
    """Raised when read-back contract metadata differs from constructor arguments"""


class DeploymentNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when no deployment record exists for a network"""


class VerificationError(DeploymentError):
    """Raised when block explorer source verification fails"""
