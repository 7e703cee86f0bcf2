"""
escrow-deployments: deploy, record and verify the escrow contract suite
"""

from importlib.metadata import PackageNotFoundError, version

from .config import PipelineConfig, load_config
from .exceptions import (
    ArtifactNotFoundError,
    ConfigurationError,
    DeploymentError,
    PersistenceError,
    PipelineError,
    ValidationError,
    VerificationError,
)
from .orchestrator import deploy
from .parameters import default_parameters, load_parameters
from .pipeline import run
from .store import FileArtifactStore, persist_artifacts
from .types import (
    EXIT_FAILURE,
    EXIT_INVALID_CONFIG,
    EXIT_OK,
    EXIT_PARTIAL,
    DeployedContract,
    DeploymentParameters,
    DeploymentResult,
    EscrowParams,
    ForwarderParams,
    PipelineReport,
    TokenParams,
    VerificationOutcome,
    VerificationStatus,
)
from .validation import validate
from .verification import verify_all

try:
    __version__ = version("escrow-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "run",
    "deploy",
    "validate",
    "persist_artifacts",
    "verify_all",
    "load_config",
    "load_parameters",
    "default_parameters",
    "FileArtifactStore",
    "PipelineConfig",
    "DeploymentParameters",
    "ForwarderParams",
    "EscrowParams",
    "TokenParams",
    "DeployedContract",
    "DeploymentResult",
    "VerificationOutcome",
    "VerificationStatus",
    "PipelineReport",
    "PipelineError",
    "ConfigurationError",
    "ValidationError",
    "DeploymentError",
    "PersistenceError",
    "VerificationError",
    "ArtifactNotFoundError",
    "EXIT_OK",
    "EXIT_FAILURE",
    "EXIT_INVALID_CONFIG",
    "EXIT_PARTIAL",
]
