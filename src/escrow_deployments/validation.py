"""Deployment parameter validation for escrow-deployments library."""

import re
from typing import Any, List

from web3 import Web3

from .constants import ESCROW_CONTRACT, FORWARDER_CONTRACT, MAX_TOKEN_DECIMALS
from .exceptions import ValidationError
from .types import DeploymentParameters, EscrowParams, TokenParams

_UNSIGNED_DECIMAL = re.compile(r"^[0-9]+$")

# Field name -> label used in error messages
_ESCROW_FIELDS = {
    "min_submission_deadline_days": "minSubmissionDeadlineDays",
    "min_review_deadline_days": "minReviewDeadlineDays",
    "min_payment_deadline_days": "minPaymentDeadlineDays",
    "lock_period_days": "lockPeriodDays",
    "deadline_extension_period_days": "deadlineExtensionPeriodDays",
}


def _is_int(value: Any) -> bool:
    # bool is a subclass of int but never a valid day count
    return isinstance(value, int) and not isinstance(value, bool)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _check_escrow(escrow: EscrowParams) -> List[str]:
    problems = []
    for attr, label in _ESCROW_FIELDS.items():
        value = getattr(escrow, attr)
        if not _is_int(value):
            problems.append(f"escrow.{label} must be an integer, got {value!r}")
        elif value < 0:
            problems.append(f"escrow.{label} must be non-negative, got {value}")
    # submission <= review <= payment is an expectation, not enforced
    return problems


def _check_token(index: int, token: TokenParams) -> List[str]:
    problems = []
    where = f"tokens[{index}]"

    if _is_blank(token.name):
        problems.append(f"{where}.name must be a non-empty string")
    if _is_blank(token.symbol):
        problems.append(f"{where}.symbol must be a non-empty string")

    supply = token.initial_supply
    if _is_int(supply):
        if supply < 0:
            problems.append(f"{where}.initialSupply must be non-negative, got {supply}")
    elif not isinstance(supply, str) or not _UNSIGNED_DECIMAL.match(supply):
        problems.append(
            f"{where}.initialSupply must be a non-negative decimal integer string, got {supply!r}"
        )

    decimals = token.custom_decimals
    if not _is_int(decimals) or not 0 <= decimals <= MAX_TOKEN_DECIMALS:
        problems.append(
            f"{where}.customDecimals must be an integer in [0, {MAX_TOKEN_DECIMALS}], "
            f"got {decimals!r}"
        )

    return problems


def collect_problems(params: DeploymentParameters) -> List[str]:
    """
    Collect every validation problem in a parameter bundle.

    Args:
        params: Parameters to check

    Returns:
        Human-readable problem descriptions, empty if the bundle is valid
    """
    problems: List[str] = []

    if _is_blank(params.forwarder.name):
        problems.append("forwarder.name must be a non-empty string")

    problems.extend(_check_escrow(params.escrow))

    seen_symbols = set()
    for index, token in enumerate(params.tokens):
        problems.extend(_check_token(index, token))
        if isinstance(token.symbol, str) and token.symbol.strip():
            # Symbols share a namespace with the core contracts in reports
            if token.symbol in (FORWARDER_CONTRACT, ESCROW_CONTRACT):
                problems.append(
                    f"tokens[{index}].symbol {token.symbol!r} clashes with a core contract name"
                )
            elif token.symbol in seen_symbols:
                problems.append(f"tokens[{index}].symbol {token.symbol!r} is duplicated")
            seen_symbols.add(token.symbol)

    return problems


def validate(params: DeploymentParameters) -> None:
    """
    Validate a parameter bundle before any network interaction.

    Args:
        params: Parameters to check

    Raises:
        ValidationError: Listing every problem found
    """
    problems = collect_problems(params)
    if problems:
        raise ValidationError(problems)


def validate_address(address: Any) -> str:
    """
    Check and checksum a 20-byte hex address.

    Args:
        address: Address as returned by a chain client

    Returns:
        EIP-55 checksummed address

    Raises:
        ValidationError: If the value is not a valid address
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        raise ValidationError(f"Invalid contract address: {address!r}")
    return Web3.to_checksum_address(address)
