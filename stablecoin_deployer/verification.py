"""
Explorer Verification
Submits contract source and constructor arguments to an Etherscan-compatible API
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
from eth_abi import encode
from eth_abi.exceptions import EncodingError

from stablecoin_deployer.artifacts import ContractArtifact, normalize_args
from stablecoin_deployer.config import NetworkConfig
from stablecoin_deployer.errors import ArtifactError, VerificationError

logger = logging.getLogger(__name__)

PENDING_STATUS = "Pending in queue"
VERIFIED_STATUSES = ("Pass - Verified", "Already Verified")
ALREADY_VERIFIED_MARKERS = ("already verified",)
NOT_INDEXED_MARKERS = ("unable to locate contractcode", "does not have bytecode")


@dataclass(frozen=True)
class VerificationResult:
    address: str
    message: str
    guid: Optional[str] = None
    already_verified: bool = False


def encode_constructor_args(types: List[str], args: Sequence[Any]) -> str:
    """ABI-encode constructor arguments as bare hex, the format explorers expect"""
    if len(types) != len(args):
        raise VerificationError(f"Constructor takes {len(types)} arguments, got {len(args)}")
    try:
        values = normalize_args(types, args)
        return encode(types, values).hex()
    except (EncodingError, ValueError, TypeError) as e:
        raise VerificationError(f"Cannot encode constructor arguments {list(args)}: {e}") from e


class EtherscanVerifier:
    def __init__(self, network: NetworkConfig, api_key: Optional[str], artifact: ContractArtifact,
                 session: Optional[aiohttp.ClientSession] = None, api_url: Optional[str] = None,
                 status_poll_interval: float = 5.0, max_status_checks: int = 30,
                 max_submit_attempts: int = 5, submit_retry_delay: float = 10.0):
        self.network = network
        self.api_key = api_key
        self.artifact = artifact
        self.session = session
        self.api_url = api_url or network.verification_api
        self.status_poll_interval = status_poll_interval
        self.max_status_checks = max_status_checks
        self.max_submit_attempts = max_submit_attempts
        self.submit_retry_delay = submit_retry_delay

    async def verify(self, address: str, constructor_args: Sequence[Any]) -> VerificationResult:
        """Verify source for ``address`` built with ``constructor_args``"""
        if not self.api_url:
            raise VerificationError(f"Network {self.network.name} has no verification API")
        if not self.api_key:
            raise VerificationError("ETHERSCAN_API_KEY is not set; cannot verify contract")

        if self.session is not None:
            return await self._verify(self.session, address, constructor_args)
        timeout = aiohttp.ClientTimeout(total=60)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            return await self._verify(session, address, constructor_args)

    async def _verify(self, session: aiohttp.ClientSession, address: str,
                      constructor_args: Sequence[Any]) -> VerificationResult:
        if await self.is_verified(session, address):
            logger.info(f"Contract {address} is already verified")
            return VerificationResult(address=address, message="Already Verified", already_verified=True)

        encoded_args = encode_constructor_args(self.artifact.constructor_types(), constructor_args)
        try:
            build_info = self.artifact.load_build_info()
        except ArtifactError as e:
            raise VerificationError(str(e)) from e

        form = {
            "module": "contract",
            "action": "verifysourcecode",
            "apikey": self.api_key,
            "contractaddress": address,
            "sourceCode": json.dumps(build_info.solc_input),
            "codeformat": "solidity-standard-json-input",
            "contractname": self.artifact.fully_qualified_name,
            "compilerversion": build_info.compiler_version,
            # Etherscan's own spelling
            "constructorArguements": encoded_args,
        }

        guid = await self._submit(session, address, form)
        if guid is None:
            return VerificationResult(address=address, message="Already Verified", already_verified=True)
        message = await self._wait_for_status(session, guid)
        logger.info(f"Verification of {address}: {message}")
        return VerificationResult(address=address, message=message, guid=guid)

    async def is_verified(self, session: aiohttp.ClientSession, address: str) -> bool:
        data = await self._request(session, "GET", params={
            "module": "contract",
            "action": "getsourcecode",
            "address": address,
            "apikey": self.api_key,
        })
        result = data.get("result")
        if data.get("status") != "1" or not isinstance(result, list) or not result:
            return False
        return bool(result[0].get("SourceCode"))

    async def _submit(self, session: aiohttp.ClientSession, address: str, form: Dict[str, str]) -> Optional[str]:
        """Submit source; returns the GUID, or None if the explorer reports it verified"""
        for attempt in range(1, self.max_submit_attempts + 1):
            data = await self._request(session, "POST", data=form)
            result = str(data.get("result", ""))
            if data.get("status") == "1":
                logger.info(f"Submitted {self.artifact.fully_qualified_name} at {address} for verification (guid {result})")
                return result
            if any(marker in result.lower() for marker in ALREADY_VERIFIED_MARKERS):
                return None
            if any(marker in result.lower() for marker in NOT_INDEXED_MARKERS) and attempt < self.max_submit_attempts:
                logger.warning(f"Explorer has not indexed {address} yet (attempt {attempt}), retrying")
                await asyncio.sleep(self.submit_retry_delay)
                continue
            raise VerificationError(f"Verification request for {address} rejected: {result}")
        raise VerificationError(f"Explorer never indexed bytecode at {address}")

    async def _wait_for_status(self, session: aiohttp.ClientSession, guid: str) -> str:
        for _ in range(self.max_status_checks):
            data = await self._request(session, "GET", params={
                "module": "contract",
                "action": "checkverifystatus",
                "guid": guid,
                "apikey": self.api_key,
            })
            result = str(data.get("result", ""))
            if result in VERIFIED_STATUSES:
                return result
            if result != PENDING_STATUS:
                raise VerificationError(f"Verification failed: {result}")
            await asyncio.sleep(self.status_poll_interval)
        raise VerificationError(f"Verification still pending after {self.max_status_checks} checks (guid {guid})")

    async def _request(self, session: aiohttp.ClientSession, method: str,
                       params: Optional[Dict[str, str]] = None,
                       data: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        query = {"chainid": str(self.network.chain_id)}
        query.update(params or {})
        try:
            async with session.request(method, self.api_url, params=query, data=data) as response:
                if response.status != 200:
                    raise VerificationError(f"Explorer API returned HTTP {response.status}")
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Explorer API request failed: {e}")
            raise VerificationError(f"Explorer API request failed: {e}") from e
