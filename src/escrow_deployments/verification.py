"""Source verification coordination for escrow-deployments library."""

import logging
import time
from typing import Any, Callable, List, Protocol, Sequence

from .constants import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_BACKOFF_INITIAL,
    DEFAULT_BACKOFF_MAX,
    DEFAULT_VERIFICATION_DELAY,
)
from .exceptions import VerificationError
from .types import DeployedContract, VerificationOutcome, VerificationStatus

logger = logging.getLogger(__name__)


class Verifier(Protocol):
    """What the coordinator needs from a source verification service."""

    def verify(self, address: str, constructor_args: Sequence[Any], contract_name: str) -> str:
        """
        Register a deployed contract's source.

        Returns:
            Service message on success

        Raises:
            VerificationError: If the service rejects the contract
        """
        ...


def backoff_delay(
    attempt: int,
    initial: float = DEFAULT_BACKOFF_INITIAL,
    factor: float = DEFAULT_BACKOFF_FACTOR,
    maximum: float = DEFAULT_BACKOFF_MAX,
) -> float:
    """Seconds to wait after failed attempt number `attempt` (1-based)."""
    return min(initial * factor ** (attempt - 1), maximum)


def _is_retryable(error: Exception) -> bool:
    if isinstance(error, VerificationError):
        return error.retryable
    # Transport-level failures from a verifier implementation
    return isinstance(error, (ConnectionError, TimeoutError))


def verify_contract(
    contract: DeployedContract,
    verifier: Verifier,
    max_attempts: int = 1,
    sleep: Callable[[float], None] = time.sleep,
    backoff: Callable[[int], float] = backoff_delay,
) -> VerificationOutcome:
    """
    Verify one contract, never raising.

    Args:
        contract: Deployed contract with its exact constructor arguments
        verifier: Verification service
        max_attempts: Attempts for retryable failures, 1 disables retries
        sleep: Sleep function (injected in tests)
        backoff: Attempt number -> seconds to wait before the next attempt

    Returns:
        VerificationOutcome, failed with the last reason if every attempt failed
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            message = verifier.verify(
                contract.address, list(contract.constructor_args), contract.contract_name
            )
        except Exception as e:
            reason = e.reason if isinstance(e, VerificationError) else str(e) or type(e).__name__
            if attempt < max_attempts and _is_retryable(e):
                wait = backoff(attempt)
                logger.warning(
                    "Verification of %s at %s failed (attempt %d/%d): %s; retrying in %.0fs",
                    contract.logical_name,
                    contract.address,
                    attempt,
                    max_attempts,
                    reason,
                    wait,
                )
                sleep(wait)
                continue

            logger.error(
                "Verification failed for %s at address: %s: %s",
                contract.logical_name,
                contract.address,
                reason,
            )
            return VerificationOutcome(
                logical_name=contract.logical_name,
                address=contract.address,
                status=VerificationStatus.FAILED,
                reason=reason,
                attempts=attempt,
            )

        logger.info(
            "Verification successful for %s at address: %s (%s)",
            contract.logical_name,
            contract.address,
            message,
        )
        return VerificationOutcome(
            logical_name=contract.logical_name,
            address=contract.address,
            status=VerificationStatus.VERIFIED,
            attempts=attempt,
        )


def verify_all(
    contracts: Sequence[DeployedContract],
    verifier: Verifier,
    delay: float = DEFAULT_VERIFICATION_DELAY,
    max_attempts: int = 1,
    sleep: Callable[[float], None] = time.sleep,
    backoff: Callable[[int], float] = backoff_delay,
) -> List[VerificationOutcome]:
    """
    Verify deployed contracts in deployment order.

    Waits `delay` seconds once, before the first attempt, so the explorer's
    indexer can catch up with the chain. Contracts are verified one at a
    time; a failure is recorded and the next contract is still attempted.

    Args:
        contracts: Contracts in deployment order
        verifier: Verification service
        delay: Indexer-lag wait in seconds
        max_attempts: Attempts per contract for retryable failures
        sleep: Sleep function (injected in tests)
        backoff: Attempt number -> seconds to wait before retrying

    Returns:
        One VerificationOutcome per contract, in the same order
    """
    if not contracts:
        return []

    if delay > 0:
        logger.info("Waiting %ss for the block explorer to catch up...", delay)
        sleep(delay)

    return [
        verify_contract(contract, verifier, max_attempts=max_attempts, sleep=sleep, backoff=backoff)
        for contract in contracts
    ]
