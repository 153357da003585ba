"""
Stablecoin Deployer
Deploys the automated stablecoin, waits for confirmations and requests explorer verification
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from web3 import Web3

from stablecoin_deployer.artifacts import ContractArtifact
from stablecoin_deployer.config import DEFAULT_CONFIRMATIONS, DeploymentConfig
from stablecoin_deployer.errors import VerificationError
from stablecoin_deployer.network import NetworkClient
from stablecoin_deployer.notifier import SlackNotifier
from stablecoin_deployer.verification import EtherscanVerifier, VerificationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeploymentResult:
    address: str
    tx_hash: str
    block_number: int
    deployer: str
    network: str
    constructor_args: Tuple[str, ...]


@dataclass(frozen=True)
class DeploymentOutcome:
    deployment: DeploymentResult
    verification: Optional[VerificationResult] = None
    verification_error: Optional[VerificationError] = None

    @property
    def verified(self) -> bool:
        return self.verification is not None


class StablecoinDeployer:
    def __init__(self, client: NetworkClient, artifact: ContractArtifact,
                 verifier: Optional[EtherscanVerifier] = None,
                 notifier: Optional[SlackNotifier] = None):
        self.client = client
        self.artifact = artifact
        self.verifier = verifier
        self.notifier = notifier or SlackNotifier()

    async def deploy(self, config: DeploymentConfig, confirmations: int = DEFAULT_CONFIRMATIONS,
                     timeout: Optional[float] = None) -> DeploymentResult:
        """Submit one creation transaction and wait until it is ``confirmations`` deep

        Every call creates a new contract instance.
        """
        signer = await self.client.resolve_signer()
        logger.info(f"Deploying contracts with account: {signer.address}")

        await self.client.connect()
        balance = await self.client.get_balance(signer.address)
        logger.info(f"Account balance: {balance} wei ({Web3.from_wei(balance, 'ether')} ETH)")

        args = config.constructor_args()
        tx_hash = await self.client.submit_creation(signer, self.artifact, args)

        logger.info(f"Waiting for {confirmations} confirmations of {tx_hash}...")
        receipt = await self.client.wait_for_confirmations(tx_hash, confirmations, timeout=timeout)

        result = DeploymentResult(
            address=receipt["contractAddress"],
            tx_hash=tx_hash,
            block_number=receipt["blockNumber"],
            deployer=signer.address,
            network=self.client.network.name,
            constructor_args=args,
        )
        logger.info(f"Contract deployed to: {result.address}")
        logger.info(f"Transaction hash: {result.tx_hash}")
        explorer_link = self.client.explorer_url("address", result.address)
        if explorer_link:
            logger.info(f"Explorer URL: {explorer_link}")
        return result

    async def verify(self, result: DeploymentResult) -> VerificationResult:
        """Verify the deployed source with the exact constructor arguments used at creation"""
        if self.verifier is None:
            raise VerificationError("No verifier configured", deployment=result)

        logger.info("Verifying contract on Etherscan...")
        try:
            return await self.verifier.verify(result.address, result.constructor_args)
        except VerificationError as e:
            e.deployment = result
            raise

    async def run(self, config: DeploymentConfig, confirmations: int = DEFAULT_CONFIRMATIONS,
                  timeout: Optional[float] = None, verify: bool = True,
                  require_verification: bool = True) -> DeploymentOutcome:
        """Deploy, then verify

        A verification failure raises when ``require_verification`` is set, even
        though the contract is already live; otherwise it is reported on the outcome.
        """
        try:
            result = await self.deploy(config, confirmations, timeout)
        except Exception as e:
            await self.notifier.send(f"❌ Deployment failed on {self.client.network.name}: {e}", "danger")
            raise

        if not verify or self.verifier is None:
            logger.info("Skipping contract verification")
            await self._notify_deployed(result, "not verified")
            return DeploymentOutcome(deployment=result)

        try:
            verification = await self.verify(result)
        except VerificationError as e:
            logger.error(f"Verification failed for {result.address}: {e}")
            await self.notifier.send(
                f"⚠️ Contract deployed to `{result.address}` but verification failed: {e}", "warning"
            )
            if require_verification:
                raise
            return DeploymentOutcome(deployment=result, verification_error=e)

        await self._notify_deployed(result, verification.message)
        return DeploymentOutcome(deployment=result, verification=verification)

    async def _notify_deployed(self, result: DeploymentResult, verification_status: str):
        await self.notifier.send(
            f"✅ {self.artifact.contract_name} deployed on {result.network}\n"
            f"Address: `{result.address}`\n"
            f"Tx: `{result.tx_hash}`\n"
            f"Verification: {verification_status}"
        )
