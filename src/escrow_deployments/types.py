"""Data types and dataclasses for escrow-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .constants import ESCROW_CONTRACT, FORWARDER_CONTRACT, TOKEN_CONTRACT
from .exceptions import DeploymentError, PersistenceError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_CONFIG = 2
EXIT_PARTIAL = 3


@dataclass(frozen=True)
class ForwarderParams:
    """Constructor parameters of the meta-transaction forwarder."""

    name: str


@dataclass(frozen=True)
class EscrowParams:
    """Deadline and period settings passed to the escrow constructor, in days."""

    min_submission_deadline_days: int
    min_review_deadline_days: int
    min_payment_deadline_days: int
    lock_period_days: int
    deadline_extension_period_days: int

    def constructor_args(self, forwarder_address: str) -> List[Any]:
        # Order is fixed by the Escrow constructor signature
        return [
            forwarder_address,
            self.min_submission_deadline_days,
            self.min_review_deadline_days,
            self.min_payment_deadline_days,
            self.lock_period_days,
            self.deadline_extension_period_days,
        ]


@dataclass(frozen=True)
class TokenParams:
    """A test ERC-20 token to deploy."""

    name: str
    symbol: str
    initial_supply: str  # Base-10 integer string, in smallest units
    custom_decimals: int

    def constructor_args(self) -> List[Any]:
        return [self.name, self.symbol, int(self.initial_supply), self.custom_decimals]


@dataclass(frozen=True)
class DeploymentParameters:
    """Immutable configuration for one pipeline run."""

    forwarder: ForwarderParams
    escrow: EscrowParams
    tokens: Tuple[TokenParams, ...] = ()


@dataclass(frozen=True)
class DeployedContract:
    """A contract deployed during this run."""

    logical_name: str  # Artifact key, e.g. "Escrow" or a token symbol
    contract_name: str  # Compiled contract, e.g. "CustomToken"
    address: str  # Checksummed address
    constructor_args: Tuple[Any, ...]


@dataclass
class DeploymentResult:
    """
    Outcome of the deployment step.

    `contracts` holds every contract deployed before the first failure, in
    deployment order. `error` is the failure that halted the sequence, if any.
    """

    network: str
    signer: Optional[str] = None
    contracts: List[DeployedContract] = field(default_factory=list)
    error: Optional[DeploymentError] = None

    def _address_of(self, logical_name: str, contract_name: str) -> Optional[str]:
        for contract in self.contracts:
            if contract.logical_name == logical_name and contract.contract_name == contract_name:
                return contract.address
        return None

    @property
    def forwarder_address(self) -> Optional[str]:
        return self._address_of(FORWARDER_CONTRACT, FORWARDER_CONTRACT)

    @property
    def escrow_address(self) -> Optional[str]:
        return self._address_of(ESCROW_CONTRACT, ESCROW_CONTRACT)

    @property
    def token_addresses(self) -> Dict[str, str]:
        return {
            c.logical_name: c.address for c in self.contracts if c.contract_name == TOKEN_CONTRACT
        }

    def core_artifacts(self) -> Dict[str, str]:
        """Forwarder and escrow addresses, in deployment order."""
        return {
            c.logical_name: c.address for c in self.contracts if c.contract_name != TOKEN_CONTRACT
        }

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def partial(self) -> bool:
        return self.error is not None and bool(self.contracts)


class VerificationStatus(Enum):
    """Per-contract verification result. Values are the serialized form."""

    VERIFIED = "verified"
    FAILED = "failed"


@dataclass(frozen=True)
class VerificationOutcome:
    logical_name: str
    address: str
    status: VerificationStatus
    reason: Optional[str] = None
    attempts: int = 1

    @property
    def verified(self) -> bool:
        return self.status is VerificationStatus.VERIFIED


@dataclass
class PipelineReport:
    """Everything a pipeline run produced, for the operator."""

    network: str
    deployment: DeploymentResult
    artifact_paths: List[Path] = field(default_factory=list)
    persistence_errors: List[PersistenceError] = field(default_factory=list)
    outcomes: List[VerificationOutcome] = field(default_factory=list)

    @property
    def failed_verifications(self) -> List[VerificationOutcome]:
        return [o for o in self.outcomes if not o.verified]

    @property
    def exit_code(self) -> int:
        """
        Process exit code for this run.

        Verification failures are reported but do not change the exit code.
        """
        if not self.deployment.contracts:
            return EXIT_FAILURE
        if self.persistence_errors:
            return EXIT_FAILURE
        if self.deployment.error is not None:
            return EXIT_PARTIAL
        return EXIT_OK

    def summary(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "signer": self.deployment.signer,
            "deployed": {c.logical_name: c.address for c in self.deployment.contracts},
            "deployment_error": str(self.deployment.error) if self.deployment.error else None,
            "artifacts": [str(p) for p in self.artifact_paths],
            "persistence_errors": [str(e) for e in self.persistence_errors],
            "verification": {
                o.logical_name: o.status.value if o.verified else f"{o.status.value}: {o.reason}"
                for o in self.outcomes
            },
            "exit_code": self.exit_code,
        }
