"""Pytest configuration and fixtures for deployer tests."""

import json
import logging
from pathlib import Path

import pytest

from stablecoin_deployer.artifacts import load_artifact
from stablecoin_deployer.config import DeploymentConfig

logging.basicConfig(level=logging.INFO)

PYTH_ADDRESS = "0xdd24f84d36bf92c65f92307595335bdfab5bbd21"
ETH_USD_FEED_ID = "0xff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace"

CONSTRUCTOR_ABI = {
    "inputs": [
        {"internalType": "address", "name": "_pyth", "type": "address"},
        {"internalType": "bytes32", "name": "_priceFeedId", "type": "bytes32"},
    ],
    "stateMutability": "nonpayable",
    "type": "constructor",
}

SOLC_INPUT = {
    "language": "Solidity",
    "sources": {"contracts/AutomatedStablecoin.sol": {"content": "pragma solidity ^0.8.20;"}},
    "settings": {"optimizer": {"enabled": True, "runs": 200}},
}


def write_artifact(artifacts_dir: Path, source_name: str, contract_name: str,
                   bytecode: str = "0x6080604052348015600f57600080fd5b50", build_info: bool = True) -> Path:
    contract_dir = artifacts_dir / source_name
    contract_dir.mkdir(parents=True, exist_ok=True)
    artifact_path = contract_dir / f"{contract_name}.json"
    artifact_path.write_text(json.dumps({
        "_format": "hh-sol-artifact-1",
        "contractName": contract_name,
        "sourceName": source_name,
        "abi": [CONSTRUCTOR_ABI],
        "bytecode": bytecode,
        "deployedBytecode": bytecode,
    }))

    if build_info:
        build_info_dir = artifacts_dir / "build-info"
        build_info_dir.mkdir(exist_ok=True)
        (build_info_dir / "f00dfeed.json").write_text(json.dumps({
            "_format": "hh-sol-build-info-1",
            "solcVersion": "0.8.20",
            "solcLongVersion": "0.8.20+commit.a1b79de6",
            "input": SOLC_INPUT,
        }))
        depth = len(Path(source_name).parts)
        relative = "/".join([".."] * depth) + "/build-info/f00dfeed.json"
        (contract_dir / f"{contract_name}.dbg.json").write_text(json.dumps({
            "_format": "hh-sol-dbg-1",
            "buildInfo": relative,
        }))
    return artifact_path


@pytest.fixture
def artifacts_dir(tmp_path):
    directory = tmp_path / "artifacts"
    write_artifact(directory, "contracts/AutomatedStablecoin.sol", "automatedStablecoin")
    return directory


@pytest.fixture
def artifact(artifacts_dir):
    return load_artifact("automatedStablecoin", artifacts_dir)


@pytest.fixture
def deployment_config():
    return DeploymentConfig(pyth_network_address=PYTH_ADDRESS, price_feed_id=ETH_USD_FEED_ID)
