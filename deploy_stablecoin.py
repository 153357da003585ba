#!/usr/bin/env python3
"""
Automated Stablecoin - Deployment Script
Deploys the contract with PYTH_NETWORK_ADDRESS and PRICE_FEED_ID, waits for
confirmations and verifies the source on the network's block explorer
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from stablecoin_deployer.artifacts import load_artifact
from stablecoin_deployer.config import (
    CONTRACT_NAME,
    DEFAULT_CONFIRMATIONS,
    DEFAULT_NETWORK,
    DeployerSettings,
    DeploymentConfig,
    NETWORK_CONFIGS,
)
from stablecoin_deployer.deployer import DeploymentOutcome, StablecoinDeployer
from stablecoin_deployer.errors import VerificationError
from stablecoin_deployer.network import DEFAULT_REQUEST_TIMEOUT, NetworkClient
from stablecoin_deployer.notifier import SlackNotifier
from stablecoin_deployer.records import save_deployment
from stablecoin_deployer.verification import EtherscanVerifier

logger = logging.getLogger(__name__)


def configure_logging(log_file: str = "deployment.log"):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Deploy and verify the automated stablecoin')
    parser.add_argument('--network', choices=sorted(NETWORK_CONFIGS),
                        default=os.getenv('DEPLOY_NETWORK', DEFAULT_NETWORK), help='Target network')
    parser.add_argument('--contract', default=CONTRACT_NAME, help='Contract name in the build artifacts')
    parser.add_argument('--artifacts-dir', help='Hardhat artifacts directory (default: ARTIFACTS_DIR or ./artifacts)')
    parser.add_argument('--confirmations', type=int, default=DEFAULT_CONFIRMATIONS,
                        help='Confirmations to wait for before verifying')
    parser.add_argument('--timeout', type=float, default=None,
                        help='Give up waiting for confirmations after this many seconds '
                             f'(each RPC request is separately bounded by {DEFAULT_REQUEST_TIMEOUT:g}s)')
    parser.add_argument('--no-verify', action='store_true', help='Skip explorer verification')
    parser.add_argument('--allow-unverified', action='store_true',
                        help='Exit successfully when deployment succeeds but verification fails')
    parser.add_argument('--output-dir', help='Write deployment details to <dir>/<network>.json')

    args = parser.parse_args(argv)
    if args.confirmations < 1:
        parser.error('--confirmations must be at least 1')
    if args.timeout is not None and args.timeout <= 0:
        parser.error('--timeout must be positive')
    return args


async def main(argv: Optional[List[str]] = None) -> DeploymentOutcome:
    """Main function"""
    args = parse_args(argv)

    # Both read once here and passed down explicitly
    config = DeploymentConfig.from_env()
    settings = DeployerSettings.from_env(args.network)

    artifact = load_artifact(args.contract, args.artifacts_dir or settings.artifacts_dir)
    client = NetworkClient(settings.network, private_key=settings.private_key)

    verifier = None
    if settings.network.verifiable and not args.no_verify:
        verifier = EtherscanVerifier(settings.network, settings.etherscan_api_key, artifact)
        if not settings.etherscan_api_key:
            logger.warning(
                f"ETHERSCAN_API_KEY is not set; {settings.network.name} deployment will not verify. "
                "Set it, or pass --no-verify or --allow-unverified"
            )

    deployer = StablecoinDeployer(client, artifact, verifier, SlackNotifier(settings.slack_webhook))
    try:
        outcome = await deployer.run(
            config,
            confirmations=args.confirmations,
            timeout=args.timeout,
            verify=not args.no_verify,
            require_verification=not args.allow_unverified,
        )
    except VerificationError as e:
        if e.deployment is not None:
            _write_record(e.deployment, args.output_dir)
        raise

    _write_record(outcome.deployment, args.output_dir)
    if outcome.verification_error is not None:
        logger.warning(f"Contract is live at {outcome.deployment.address} but unverified")
    return outcome


def _write_record(result, output_dir: Optional[str]):
    if not output_dir:
        return
    try:
        save_deployment(result, output_dir)
    except OSError as e:
        logger.error(f"Error saving deployment details: {e}")


def run(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    configure_logging()
    try:
        outcome = asyncio.run(main(argv))
    except KeyboardInterrupt:
        logger.info("Deployment interrupted by user")
        return 1
    except VerificationError as e:
        if e.deployment is not None:
            print(f"Contract deployed to: {e.deployment.address} (unverified)")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Contract deployed to: {outcome.deployment.address}")
    print(f"Transaction hash: {outcome.deployment.tx_hash}")
    return 0


if __name__ == "__main__":
    sys.exit(run())
