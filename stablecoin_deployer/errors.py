"""
Deployment Errors
Every failure in the deployment workflow surfaces as a DeployError subclass
"""


class DeployError(Exception):
    """Base class for deployment workflow failures"""


class ConfigError(DeployError):
    """Required configuration is missing or invalid"""


class ArtifactError(DeployError):
    """Contract build artifact could not be loaded"""


class NoSignerError(DeployError):
    """No usable signing identity is available"""


class ProviderError(DeployError):
    """RPC or transport failure while talking to the node"""


class ConfirmationTimeoutError(ProviderError):
    """Confirmation depth was not reached before the timeout"""

    def __init__(self, tx_hash: str, confirmations: int, timeout: float):
        self.tx_hash = tx_hash
        self.confirmations = confirmations
        self.timeout = timeout
        super().__init__(
            f"Transaction {tx_hash} did not reach {confirmations} confirmations "
            f"within {timeout}s"
        )


class CreationRejectedError(DeployError):
    """The contract-creation transaction was rejected or reverted"""


class VerificationError(DeployError):
    """Explorer source verification failed

    The contract is already live when this is raised; ``deployment`` holds
    the DeploymentResult when verification ran after a deployment.
    """

    def __init__(self, message: str, deployment=None):
        super().__init__(message)
        self.deployment = deployment
