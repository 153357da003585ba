"""
Deployment Records
Persists deployment details so later tooling can find the contract
"""

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


def save_deployment(result, output_dir="deployments") -> Path:
    """Write ``<output_dir>/<network>.json`` for a DeploymentResult"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{result.network}.json"

    record = asdict(result)
    record["constructor_args"] = list(result.constructor_args)
    record["deployed_at"] = datetime.now(timezone.utc).isoformat()

    with open(path, "w") as f:
        json.dump(record, f, indent=2)
    logger.info(f"Deployment details saved to {path}")
    return path
