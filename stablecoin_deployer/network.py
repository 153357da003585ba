"""
Network Client
Signer resolution, balance lookup, contract creation and confirmation tracking over web3
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from eth_account import Account
from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import (
    ContractLogicError,
    InvalidAddress,
    MismatchedABI,
    TransactionNotFound,
    Web3Exception,
    Web3RPCError,
    Web3TypeError,
    Web3ValidationError,
    Web3ValueError,
)

from stablecoin_deployer.artifacts import ContractArtifact
from stablecoin_deployer.config import NetworkConfig
from stablecoin_deployer.errors import (
    ConfirmationTimeoutError,
    CreationRejectedError,
    NoSignerError,
    ProviderError,
)

logger = logging.getLogger(__name__)

LOCAL_NETWORKS = ["local"]
DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_REQUEST_TIMEOUT = 30.0

# Errors about the transaction itself, from the node or from web3's argument checks
REJECTION_ERRORS = (
    Web3RPCError, ContractLogicError, Web3ValidationError, InvalidAddress,
    MismatchedABI, Web3TypeError, Web3ValueError,
)
TRANSPORT_ERRORS = (Web3Exception, OSError)


@dataclass(frozen=True)
class Signer:
    address: str
    private_key: Optional[str] = field(default=None, repr=False)

    @property
    def is_local(self) -> bool:
        """True when transactions are signed in-process rather than by the node"""
        return self.private_key is not None


def confirmations_of(inclusion_block: int, head: int) -> int:
    """Confirmation count as ethers reports it: the inclusion block counts as one"""
    return max(0, head - inclusion_block + 1)


class NetworkClient:
    def __init__(self, network: NetworkConfig, private_key: Optional[str] = None,
                 web3: Optional[Web3] = None, poll_interval: float = DEFAULT_POLL_INTERVAL,
                 request_timeout: float = DEFAULT_REQUEST_TIMEOUT):
        self.network = network
        self.private_key = private_key
        # Building the provider does not touch the network. web3 calls block the
        # event loop, so each one is bounded by the HTTP timeout.
        if web3 is None:
            web3 = Web3(Web3.HTTPProvider(network.rpc, request_kwargs={"timeout": request_timeout}))
        self.web3 = web3
        self.poll_interval = poll_interval

    async def connect(self):
        """Check the node is reachable"""
        try:
            connected = self.web3.is_connected()
        except TRANSPORT_ERRORS as e:
            raise ProviderError(f"Failed to connect to {self.network.name} at {self.network.rpc}: {e}") from e
        if not connected:
            raise ProviderError(f"Failed to connect to {self.network.name} at {self.network.rpc}")
        logger.info(f"Connected to {self.network.name} (chain id {self.network.chain_id})")

    async def resolve_signer(self) -> Signer:
        """Resolve the deploying account

        A configured private key is used without touching the network. Without
        one, only a local development node may lend its first unlocked account.
        """
        if self.private_key:
            try:
                account = Account.from_key(self.private_key)
            except (ValueError, TypeError) as e:
                raise NoSignerError(f"Invalid deployer private key: {e}") from e
            return Signer(address=account.address, private_key=self.private_key)

        if self.network.name not in LOCAL_NETWORKS:
            raise NoSignerError(f"No deployer private key configured for {self.network.name} (set DEPLOYER_PRIVATE_KEY)")

        try:
            accounts = self.web3.eth.accounts
        except TRANSPORT_ERRORS as e:
            raise ProviderError(f"Failed to list node accounts: {e}") from e
        if not accounts:
            raise NoSignerError(f"Node at {self.network.rpc} exposes no unlocked accounts")
        return Signer(address=to_checksum_address(accounts[0]))

    async def get_balance(self, address: str) -> int:
        """Get account balance in wei"""
        try:
            return self.web3.eth.get_balance(address)
        except TRANSPORT_ERRORS as e:
            logger.error(f"Failed to get balance for {address}: {e}")
            raise ProviderError(f"Failed to get balance for {address}: {e}") from e

    async def submit_creation(self, signer: Signer, artifact: ContractArtifact, args: Sequence[Any]) -> str:
        """Send the contract-creation transaction once and return its hash"""
        try:
            args = artifact.normalize_args(args)
        except (ValueError, TypeError) as e:
            logger.error(f"Invalid constructor arguments {list(args)}: {e}")
            raise CreationRejectedError(f"Invalid constructor arguments for {artifact.contract_name}: {e}") from e

        factory = self.web3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        try:
            constructor = factory.constructor(*args)
            if signer.is_local:
                tx = constructor.build_transaction({
                    "from": signer.address,
                    "nonce": self.web3.eth.get_transaction_count(signer.address, "pending"),
                    "chainId": self.network.chain_id,
                })
                signed_tx = self.web3.eth.account.sign_transaction(tx, private_key=signer.private_key)
                tx_hash = self.web3.eth.send_raw_transaction(signed_tx.raw_transaction)
            else:
                tx_hash = constructor.transact({"from": signer.address})
        except REJECTION_ERRORS as e:
            logger.error(f"Contract creation rejected: {e}")
            raise CreationRejectedError(f"Creation of {artifact.contract_name} rejected: {e}") from e
        except TRANSPORT_ERRORS as e:
            logger.error(f"Failed to submit contract creation: {e}")
            raise ProviderError(f"Failed to submit creation of {artifact.contract_name}: {e}") from e

        tx_hash = Web3.to_hex(tx_hash)
        logger.info(f"Creation transaction sent: {tx_hash}")
        return tx_hash

    async def wait_for_confirmations(self, tx_hash: str, confirmations: int,
                                     timeout: Optional[float] = None,
                                     poll_interval: Optional[float] = None) -> Dict[str, Any]:
        """Block until the transaction is mined and ``confirmations`` deep

        ``timeout=None`` waits indefinitely.
        """
        poll_interval = self.poll_interval if poll_interval is None else poll_interval
        waiter = self._poll_confirmations(tx_hash, confirmations, poll_interval)
        if timeout is None:
            return await waiter
        try:
            return await asyncio.wait_for(waiter, timeout)
        except asyncio.TimeoutError:
            logger.error(f"Timed out waiting for {confirmations} confirmations of {tx_hash}")
            raise ConfirmationTimeoutError(tx_hash, confirmations, timeout) from None

    async def _poll_confirmations(self, tx_hash: str, confirmations: int, poll_interval: float) -> Dict[str, Any]:
        # Re-read every poll; a reorg may move or drop the transaction
        mined_in = None
        while True:
            try:
                receipt = self.web3.eth.get_transaction_receipt(tx_hash)
                if receipt["blockNumber"] != mined_in:
                    self._check_receipt(tx_hash, receipt)
                    if mined_in is None:
                        logger.info(f"Transaction {tx_hash} mined in block {receipt['blockNumber']}")
                    else:
                        logger.warning(f"Transaction {tx_hash} moved from block {mined_in} to {receipt['blockNumber']}")
                    mined_in = receipt["blockNumber"]
                head = self.web3.eth.block_number
            except TransactionNotFound:
                if mined_in is not None:
                    logger.warning(f"Transaction {tx_hash} dropped from block {mined_in} by a reorg")
                    mined_in = None
                else:
                    logger.debug(f"Transaction {tx_hash} pending")
            except TRANSPORT_ERRORS as e:
                logger.error(f"Error while waiting for {tx_hash}: {e}")
                raise ProviderError(f"Failed while waiting for {tx_hash}: {e}") from e
            else:
                depth = confirmations_of(receipt["blockNumber"], head)
                if depth >= confirmations:
                    return receipt
                logger.debug(f"Transaction {tx_hash} has {depth}/{confirmations} confirmations")

            await asyncio.sleep(poll_interval)

    @staticmethod
    def _check_receipt(tx_hash: str, receipt):
        if receipt["status"] != 1:
            raise CreationRejectedError(f"Creation transaction {tx_hash} reverted in block {receipt['blockNumber']}")
        if not receipt.get("contractAddress"):
            raise CreationRejectedError(f"Transaction {tx_hash} did not create a contract")

    def explorer_url(self, kind: str, value: str) -> Optional[str]:
        """Get explorer URL for an address or transaction"""
        if not self.network.explorer:
            return None
        return f"{self.network.explorer}/{kind}/{value}"
