"""
Automated Stablecoin Deployer
Deploys the automatedStablecoin contract and verifies its source on a block explorer
"""

from stablecoin_deployer.config import DeploymentConfig, DeployerSettings, NetworkConfig
from stablecoin_deployer.deployer import DeploymentOutcome, DeploymentResult, StablecoinDeployer
from stablecoin_deployer.errors import (
    ArtifactError,
    ConfigError,
    ConfirmationTimeoutError,
    CreationRejectedError,
    DeployError,
    NoSignerError,
    ProviderError,
    VerificationError,
)

__all__ = [
    "ArtifactError",
    "ConfigError",
    "ConfirmationTimeoutError",
    "CreationRejectedError",
    "DeployError",
    "DeployerSettings",
    "DeploymentConfig",
    "DeploymentOutcome",
    "DeploymentResult",
    "NetworkConfig",
    "NoSignerError",
    "ProviderError",
    "StablecoinDeployer",
    "VerificationError",
]
