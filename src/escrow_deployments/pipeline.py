"""End-to-end deploy, persist and verify pipeline for escrow-deployments library."""

import logging
import time
from typing import Callable, Dict, List, Optional

from .chain import ChainClient
from .constants import (
    DEFAULT_VERIFICATION_DELAY,
    ESCROW_CONTRACT,
    FORWARDER_CONTRACT,
    TOKEN_CONTRACT,
)
from .exceptions import PersistenceError
from .orchestrator import deploy
from .store import ArtifactStore, persist_artifacts
from .types import DeployedContract, DeploymentParameters, PipelineReport
from .validation import validate, validate_address
from .verification import Verifier, verify_all

logger = logging.getLogger(__name__)


def run(
    params: DeploymentParameters,
    chain_client: ChainClient,
    verifier: Optional[Verifier],
    store: ArtifactStore,
    network: str,
    include_tokens: bool = False,
    verify: bool = True,
    verification_delay: float = DEFAULT_VERIFICATION_DELAY,
    max_verification_attempts: int = 1,
    sleep: Callable[[float], None] = time.sleep,
) -> PipelineReport:
    """
    Validate, deploy, persist and verify.

    Failure policy:
    - invalid parameters raise before any network call;
    - a deployment failure stops further deployments, but whatever was
      deployed is still persisted and verified;
    - a persistence failure is recorded and verification still runs;
    - verification failures are recorded per contract.

    Args:
        params: Deployment parameters
        chain_client: Chain connection used for deployment
        verifier: Verification service (may be None when verify is False)
        store: Where artifact files are written
        network: Network name
        include_tokens: Also deploy the token batch
        verify: Run verification after deployment
        verification_delay: Indexer-lag wait before the first verification
        max_verification_attempts: Attempts per contract, 1 disables retries
        sleep: Sleep function (injected in tests)

    Returns:
        PipelineReport

    Raises:
        ValidationError: If params are invalid
        ValueError: If verify is requested without a verifier
    """
    validate(params)
    if verify and verifier is None:
        raise ValueError("A verifier is required when verify is True")

    deployment = deploy(params, chain_client, network, include_tokens=include_tokens)
    report = PipelineReport(network=network, deployment=deployment)

    if not deployment.contracts:
        # Nothing to persist; an earlier run's artifact file is left untouched
        logger.error("No contracts were deployed on %s", network)
        return report

    if deployment.partial:
        logger.warning(
            "Partial deployment on %s: %d contract(s) deployed before %s failed",
            network,
            len(deployment.contracts),
            deployment.error.contract_name,
        )

    to_persist = [("contracts", deployment.core_artifacts())]
    if include_tokens and deployment.token_addresses:
        to_persist.append(("tokens", deployment.token_addresses))

    for kind, artifacts in to_persist:
        try:
            report.artifact_paths.append(persist_artifacts(network, artifacts, store, kind=kind))
        except PersistenceError as e:
            logger.error("%s", e)
            report.persistence_errors.append(e)

    if verify:
        report.outcomes = verify_all(
            deployment.contracts,
            verifier,
            delay=verification_delay,
            max_attempts=max_verification_attempts,
            sleep=sleep,
        )
        failed = report.failed_verifications
        if failed:
            logger.warning(
                "%d of %d contract(s) failed verification: %s",
                len(failed),
                len(report.outcomes),
                ", ".join(o.logical_name for o in failed),
            )
    else:
        logger.info("Verification skipped")

    return report


def contracts_from_artifacts(
    params: DeploymentParameters,
    core_artifacts: Dict[str, str],
    token_artifacts: Optional[Dict[str, str]] = None,
) -> List[DeployedContract]:
    """
    Rebuild deployed contracts from persisted addresses.

    Constructor arguments are recomputed from params, so params must be
    the ones the contracts were deployed with.

    Args:
        params: Parameters used for the original deployment
        core_artifacts: Contents of deployedContracts-<network>.json
        token_artifacts: Contents of deployedTokens-<network>.json

    Returns:
        Contracts in deployment order

    Raises:
        ValidationError: If an address is malformed
    """
    contracts: List[DeployedContract] = []

    forwarder_address = core_artifacts.get(FORWARDER_CONTRACT)
    if forwarder_address is not None:
        contracts.append(
            DeployedContract(
                logical_name=FORWARDER_CONTRACT,
                contract_name=FORWARDER_CONTRACT,
                address=validate_address(forwarder_address),
                constructor_args=(params.forwarder.name,),
            )
        )

        escrow_address = core_artifacts.get(ESCROW_CONTRACT)
        if escrow_address is not None:
            contracts.append(
                DeployedContract(
                    logical_name=ESCROW_CONTRACT,
                    contract_name=ESCROW_CONTRACT,
                    address=validate_address(escrow_address),
                    constructor_args=tuple(
                        params.escrow.constructor_args(validate_address(forwarder_address))
                    ),
                )
            )

    token_artifacts = token_artifacts or {}
    for token in params.tokens:
        if token.symbol in token_artifacts:
            contracts.append(
                DeployedContract(
                    logical_name=token.symbol,
                    contract_name=TOKEN_CONTRACT,
                    address=validate_address(token_artifacts[token.symbol]),
                    constructor_args=tuple(token.constructor_args()),
                )
            )

    return contracts
