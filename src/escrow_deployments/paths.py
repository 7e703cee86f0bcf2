"""Path management utilities for escrow-deployments library."""

from pathlib import Path
from typing import Optional, Union

from .constants import ARTIFACT_PREFIXES, DEFAULT_ARTIFACTS_DIR


def get_default_artifacts_dir() -> Path:
    """
    Get default directory for deployed-address artifacts.

    Returns:
        Path to ./deployments
    """
    return Path.cwd() / DEFAULT_ARTIFACTS_DIR


def get_artifact_filename(network: str, kind: str = "contracts") -> str:
    """
    Get the artifact filename for a network.

    Args:
        network: Network name, e.g. "polygonMumbai"
        kind: "contracts" or "tokens"

    Returns:
        e.g. "deployedContracts-polygonMumbai.json"

    Raises:
        ValueError: If kind is unknown or network is empty
    """
    if kind not in ARTIFACT_PREFIXES:
        raise ValueError(f"Unknown artifact kind: {kind}")
    if not network:
        raise ValueError("Network name must not be empty")
    return f"{ARTIFACT_PREFIXES[kind]}-{network}.json"


def get_artifact_path(
    network: str,
    kind: str = "contracts",
    artifacts_root: Optional[Union[Path, str]] = None,
) -> Path:
    """
    Get the absolute path of an artifact file.

    Args:
        network: Network name
        kind: "contracts" or "tokens"
        artifacts_root: Custom artifact directory (defaults to ./deployments)

    Returns:
        Absolute path to the artifact file
    """
    if artifacts_root is None:
        artifacts_root = get_default_artifacts_dir()
    else:
        artifacts_root = Path(artifacts_root).absolute()

    return artifacts_root / get_artifact_filename(network, kind)
