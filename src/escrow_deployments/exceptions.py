"""Custom exception classes for escrow-deployments library."""

from pathlib import Path
from typing import List, Optional, Union


class PipelineError(Exception):
    """Base exception for deployment pipeline errors."""

    pass


class ConfigurationError(PipelineError, ValueError):
    """Raised when required runtime configuration is missing or unknown."""

    pass


class ArtifactNotFoundError(PipelineError, FileNotFoundError):
    """Raised when a hardhat compilation artifact cannot be found."""

    pass


class ValidationError(PipelineError, ValueError):
    """Raised when deployment parameters violate domain invariants."""

    def __init__(self, problems: Union[str, List[str]]):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class DeploymentError(PipelineError):
    """Raised when a contract deployment transaction fails or reverts."""

    def __init__(self, contract_name: str, cause: Optional[BaseException] = None):
        self.contract_name = contract_name
        self.cause = cause
        message = f"Deployment of {contract_name} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class PersistenceError(PipelineError, OSError):
    """Raised when an artifact file cannot be written."""

    def __init__(self, path: Union[Path, str], cause: Optional[BaseException] = None):
        self.path = Path(path)
        self.cause = cause
        message = f"Failed to write artifact file {self.path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class VerificationError(PipelineError):
    """
    Raised when the verification service rejects a contract.

    `retryable` marks failures that may succeed on a later attempt, e.g. the
    explorer has not indexed the bytecode yet or the request timed out.
    """

    def __init__(self, contract_name: str, reason: str, retryable: bool = False):
        self.contract_name = contract_name
        self.reason = reason
        self.retryable = retryable
        super().__init__(f"Verification of {contract_name} failed: {reason}")
