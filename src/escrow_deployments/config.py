"""Runtime configuration for escrow-deployments library."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Union

from .constants import (
    DEFAULT_HARDHAT_ARTIFACTS_DIR,
    DEFAULT_VERIFICATION_DELAY,
    ETHERSCAN_V2_API_URL,
    NETWORK_CONFIG,
    PRIVATE_KEY_ENV,
)
from .exceptions import ConfigurationError
from .paths import get_default_artifacts_dir


@dataclass(frozen=True)
class PipelineConfig:
    """
    Everything a pipeline run needs from its environment.

    Built once at process start by load_config() and passed down explicitly.
    """

    network: str
    chain_id: int
    rpc_url: str
    private_key: str = field(repr=False)
    explorer_api_key: Optional[str] = field(default=None, repr=False)
    explorer_api_url: str = ETHERSCAN_V2_API_URL
    hardhat_artifacts_dir: Path = Path(DEFAULT_HARDHAT_ARTIFACTS_DIR)
    output_dir: Path = field(default_factory=get_default_artifacts_dir)
    verify: bool = True
    verification_delay: float = DEFAULT_VERIFICATION_DELAY
    max_verification_attempts: int = 1


def load_config(
    network: str,
    rpc_url: Optional[str] = None,
    private_key: Optional[str] = None,
    explorer_api_key: Optional[str] = None,
    verify: bool = True,
    hardhat_artifacts_dir: Optional[Union[Path, str]] = None,
    output_dir: Optional[Union[Path, str]] = None,
    verification_delay: float = DEFAULT_VERIFICATION_DELAY,
    max_verification_attempts: int = 1,
    env: Optional[Mapping[str, str]] = None,
) -> PipelineConfig:
    """
    Build the pipeline configuration, falling back to environment variables.

    Args:
        network: Network name, must be a key of NETWORK_CONFIG
        rpc_url: RPC endpoint (defaults to the network's RPC env variable)
        private_key: Deployer key (defaults to $PRIVATE_KEY)
        explorer_api_key: Verification API key (defaults to the network's key env variable)
        verify: Whether verification will run; an API key is only required if so
        hardhat_artifacts_dir: Hardhat compilation output (defaults to ./artifacts)
        output_dir: Where deployed addresses are written (defaults to ./deployments)
        verification_delay: Seconds to wait for the explorer indexer
        max_verification_attempts: Attempts per contract, 1 disables retries
        env: Environment mapping (defaults to os.environ)

    Returns:
        PipelineConfig

    Raises:
        ConfigurationError: If the network is unknown or a required value is missing
    """
    if env is None:
        env = os.environ

    if network not in NETWORK_CONFIG:
        known = ", ".join(sorted(NETWORK_CONFIG))
        raise ConfigurationError(f"Unknown network '{network}' (known: {known})")
    network_config = NETWORK_CONFIG[network]

    # Explicit arguments win over the environment
    if rpc_url is None:
        rpc_url = env.get(network_config["default_rpc_env"])
    if private_key is None:
        private_key = env.get(PRIVATE_KEY_ENV)
    api_key_env = network_config["explorer_api_key_env"]
    if explorer_api_key is None and api_key_env is not None:
        explorer_api_key = env.get(api_key_env)

    missing = []
    if not rpc_url:
        missing.append(f"RPC URL (set ${network_config['default_rpc_env']} or pass rpc_url)")
    if not private_key:
        missing.append(f"signing key (set ${PRIVATE_KEY_ENV} or pass private_key)")
    if verify:
        if api_key_env is None:
            missing.append(f"verification service (network '{network}' has no block explorer)")
        elif not explorer_api_key:
            missing.append(f"verification API key (set ${api_key_env} or pass explorer_api_key)")
    if missing:
        raise ConfigurationError("Missing required configuration: " + "; ".join(missing))

    if max_verification_attempts < 1:
        raise ConfigurationError("max_verification_attempts must be at least 1")
    if verification_delay < 0:
        raise ConfigurationError("verification_delay must be non-negative")

    return PipelineConfig(
        network=network,
        chain_id=network_config["chain_id"],
        rpc_url=rpc_url,
        private_key=private_key,
        explorer_api_key=explorer_api_key,
        hardhat_artifacts_dir=Path(hardhat_artifacts_dir or DEFAULT_HARDHAT_ARTIFACTS_DIR).absolute(),
        output_dir=(
            Path(output_dir).absolute() if output_dir is not None else get_default_artifacts_dir()
        ),
        verify=verify,
        verification_delay=verification_delay,
        max_verification_attempts=max_verification_attempts,
    )
