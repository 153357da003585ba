"""
Deployment Configuration
Constructor arguments, network table and runtime settings read from the environment
"""

import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from stablecoin_deployer.errors import ConfigError

CONTRACT_NAME = "automatedStablecoin"
DEFAULT_CONFIRMATIONS = 5
DEFAULT_NETWORK = "local"
ETHERSCAN_API_URL = "https://api.etherscan.io/v2/api"

PYTH_NETWORK_ADDRESS_VAR = "PYTH_NETWORK_ADDRESS"
PRICE_FEED_ID_VAR = "PRICE_FEED_ID"


@dataclass(frozen=True)
class DeploymentConfig:
    """Constructor arguments for the stablecoin contract"""

    pyth_network_address: str
    price_feed_id: str

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DeploymentConfig":
        """Read both constructor arguments once; only presence is checked"""
        environ = os.environ if environ is None else environ
        values = {name: environ.get(name, "").strip() for name in (PYTH_NETWORK_ADDRESS_VAR, PRICE_FEED_ID_VAR)}
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")
        return cls(
            pyth_network_address=values[PYTH_NETWORK_ADDRESS_VAR],
            price_feed_id=values[PRICE_FEED_ID_VAR],
        )

    def constructor_args(self) -> Tuple[str, str]:
        return (self.pyth_network_address, self.price_feed_id)


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    rpc: str
    chain_id: int
    explorer: Optional[str] = None
    verification_api: Optional[str] = None

    @property
    def verifiable(self) -> bool:
        return self.verification_api is not None


# Network configurations
NETWORK_CONFIGS: Dict[str, Dict] = {
    "local": {
        "rpc": "http://127.0.0.1:8545",
        "chain_id": 31337,
    },
    "mainnet": {
        "rpc": "https://eth.llamarpc.com",
        "explorer": "https://etherscan.io",
        "chain_id": 1,
    },
    "sepolia": {
        "rpc": "https://rpc.sepolia.org",
        "explorer": "https://sepolia.etherscan.io",
        "chain_id": 11155111,
    },
    "polygon": {
        "rpc": "https://polygon-rpc.com",
        "explorer": "https://polygonscan.com",
        "chain_id": 137,
    },
    "bsc": {
        "rpc": "https://bsc-dataseed.binance.org",
        "explorer": "https://bscscan.com",
        "chain_id": 56,
    },
    "avalanche": {
        "rpc": "https://api.avax.network/ext/bc/C/rpc",
        "explorer": "https://snowtrace.io",
        "chain_id": 43114,
    },
}


def get_network_config(name: str, environ: Optional[Mapping[str, str]] = None) -> NetworkConfig:
    """Resolve a network by name; ``<NAME>_RPC`` overrides the default endpoint"""
    environ = os.environ if environ is None else environ
    if name not in NETWORK_CONFIGS:
        raise ConfigError(f"Unsupported network: {name} (choose from {', '.join(NETWORK_CONFIGS)})")

    config = NETWORK_CONFIGS[name]
    explorer = config.get("explorer")
    return NetworkConfig(
        name=name,
        rpc=environ.get(f"{name.upper()}_RPC") or config["rpc"],
        chain_id=config["chain_id"],
        explorer=explorer,
        verification_api=ETHERSCAN_API_URL if explorer else None,
    )


@dataclass(frozen=True)
class DeployerSettings:
    """Operator settings that are not contract inputs"""

    network: NetworkConfig
    private_key: Optional[str] = None
    etherscan_api_key: Optional[str] = None
    artifacts_dir: str = "artifacts"
    slack_webhook: Optional[str] = None

    @classmethod
    def from_env(cls, network: str, environ: Optional[Mapping[str, str]] = None) -> "DeployerSettings":
        environ = os.environ if environ is None else environ
        return cls(
            network=get_network_config(network, environ),
            private_key=environ.get("DEPLOYER_PRIVATE_KEY") or None,
            etherscan_api_key=environ.get("ETHERSCAN_API_KEY") or None,
            artifacts_dir=environ.get("ARTIFACTS_DIR") or "artifacts",
            slack_webhook=environ.get("SLACK_WEBHOOK_URL") or None,
        )
