"""
Contract Artifacts
Loads Hardhat build artifacts (ABI, bytecode, compiler input) by contract name
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from eth_utils import decode_hex, to_checksum_address
from eth_utils.abi import collapse_if_tuple

from stablecoin_deployer.errors import ArtifactError

logger = logging.getLogger(__name__)

BUILD_INFO_DIR = "build-info"
DEBUG_SUFFIX = ".dbg.json"


def normalize_arg(abi_type: str, value: Any) -> Any:
    """Coerce an environment string into the value web3 and eth_abi expect for ``abi_type``"""
    if not isinstance(value, str):
        return value
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type.startswith("bytes"):
        return decode_hex(value)
    if abi_type.startswith(("uint", "int")):
        return int(value, 0)
    if abi_type == "bool":
        return value.lower() == "true"
    return value


def normalize_args(types: Sequence[str], args: Sequence[Any]) -> List[Any]:
    """Raises ValueError when the values do not fit the types"""
    if len(types) != len(args):
        raise ValueError(f"Constructor takes {len(types)} arguments, got {len(args)}")
    return [normalize_arg(abi_type, value) for abi_type, value in zip(types, args)]


@dataclass(frozen=True)
class BuildInfo:
    solc_version: str
    solc_input: Dict[str, Any]

    @property
    def compiler_version(self) -> str:
        """Compiler version in the form explorers expect, e.g. v0.8.20+commit.a1b79de6"""
        return self.solc_version if self.solc_version.startswith("v") else f"v{self.solc_version}"


@dataclass(frozen=True)
class ContractArtifact:
    contract_name: str
    source_name: str
    abi: List[Dict[str, Any]] = field(repr=False)
    bytecode: str = field(repr=False)
    path: Optional[Path] = None

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"

    def constructor_types(self) -> List[str]:
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return [collapse_if_tuple(arg) for arg in entry.get("inputs", [])]
        return []

    def normalize_args(self, args: Sequence[Any]) -> List[Any]:
        return normalize_args(self.constructor_types(), args)

    def load_build_info(self) -> BuildInfo:
        """Read the compiler input this artifact was built from"""
        if self.path is None:
            raise ArtifactError(f"No artifact path recorded for {self.fully_qualified_name}")

        dbg_path = self.path.with_name(self.path.stem + DEBUG_SUFFIX)
        try:
            dbg = json.loads(dbg_path.read_text())
            build_info_path = (dbg_path.parent / dbg["buildInfo"]).resolve()
            build_info = json.loads(build_info_path.read_text())
            return BuildInfo(
                solc_version=build_info.get("solcLongVersion") or build_info["solcVersion"],
                solc_input=build_info["input"],
            )
        except (OSError, ValueError, KeyError) as e:
            raise ArtifactError(f"Build info unavailable for {self.fully_qualified_name}: {e}") from e


def _candidate_paths(artifacts_dir: Path, contract_name: str) -> List[Path]:
    return sorted(
        path for path in artifacts_dir.rglob(f"{contract_name}.json")
        if BUILD_INFO_DIR not in path.parts and not path.name.endswith(DEBUG_SUFFIX)
    )


def load_artifact(contract_name: str, artifacts_dir="artifacts") -> ContractArtifact:
    """Resolve a contract the way ``getContractFactory(name)`` does"""
    artifacts_dir = Path(artifacts_dir)
    if not artifacts_dir.is_dir():
        raise ArtifactError(f"Artifacts directory not found: {artifacts_dir}. Compile the contracts first")

    candidates = _candidate_paths(artifacts_dir, contract_name)
    if not candidates:
        raise ArtifactError(f"Artifact for contract '{contract_name}' not found in {artifacts_dir}")

    artifacts = []
    for path in candidates:
        try:
            data = json.loads(path.read_text())
        except (OSError, ValueError) as e:
            raise ArtifactError(f"Malformed artifact {path}: {e}") from e
        if data.get("contractName") != contract_name:
            continue
        artifacts.append(ContractArtifact(
            contract_name=contract_name,
            source_name=data.get("sourceName", ""),
            abi=data.get("abi", []),
            bytecode=data.get("bytecode", ""),
            path=path,
        ))

    if not artifacts:
        raise ArtifactError(f"Artifact for contract '{contract_name}' not found in {artifacts_dir}")
    if len(artifacts) > 1:
        names = ", ".join(a.fully_qualified_name for a in artifacts)
        raise ArtifactError(f"Multiple artifacts for contract '{contract_name}': {names}. Use a unique name")

    artifact = artifacts[0]
    if artifact.bytecode in ("", "0x"):
        raise ArtifactError(f"{artifact.fully_qualified_name} has no bytecode; is it abstract or an interface?")

    logger.info(f"Loaded artifact {artifact.fully_qualified_name} from {artifact.path}")
    return artifact
