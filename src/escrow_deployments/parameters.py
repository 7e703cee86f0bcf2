"""Deployment parameter loading for escrow-deployments library."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .constants import DEFAULT_ESCROW_PARAMS, DEFAULT_FORWARDER_PARAMS, DEFAULT_TOKEN_PARAMS
from .exceptions import ValidationError
from .types import DeploymentParameters, EscrowParams, ForwarderParams, TokenParams


def _require_object(data: Any, where: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(f"{where} must be an object, got {type(data).__name__}")
    return data


def parse_forwarder_params(data: Dict[str, Any]) -> ForwarderParams:
    data = _require_object(data, "forwarder")
    return ForwarderParams(name=data["name"])


def parse_escrow_params(data: Dict[str, Any]) -> EscrowParams:
    """
    Map an escrow parameter table to EscrowParams.

    Args:
        data: Dict keyed by the camelCase names used in deployParameters

    Returns:
        EscrowParams (not validated)

    Raises:
        ValidationError: If data is not an object
        KeyError: If a field is missing
    """
    data = _require_object(data, "escrow")
    return EscrowParams(
        min_submission_deadline_days=data["minSubmissionDeadlineDays"],
        min_review_deadline_days=data["minReviewDeadlineDays"],
        min_payment_deadline_days=data["minPaymentDeadlineDays"],
        lock_period_days=data["lockPeriodDays"],
        deadline_extension_period_days=data["deadlineExtensionPeriodDays"],
    )


def parse_token_params(data: List[Dict[str, Any]]) -> tuple[TokenParams, ...]:
    if not isinstance(data, list):
        raise ValidationError(f"tokens must be a list of objects, got {type(data).__name__}")

    # Keep table order; it is the deployment order
    return tuple(
        TokenParams(
            name=entry["name"],
            symbol=entry["symbol"],
            initial_supply=entry["initialSupply"],
            custom_decimals=entry["customDecimals"],
        )
        for entry in (_require_object(e, f"tokens[{i}]") for i, e in enumerate(data))
    )


def parameters_from_dict(data: Dict[str, Any]) -> DeploymentParameters:
    """
    Build DeploymentParameters from a parameter table.

    Sections missing from `data` fall back to the documented defaults.
    Only the shape is checked here; call validation.validate() for values.

    Args:
        data: Dict with optional "forwarder", "escrow" and "tokens" sections

    Returns:
        DeploymentParameters

    Raises:
        ValidationError: If data or one of its sections has the wrong shape
        KeyError: If a section is missing a required field
    """
    data = _require_object(data, "parameter file")
    return DeploymentParameters(
        forwarder=parse_forwarder_params(data.get("forwarder", DEFAULT_FORWARDER_PARAMS)),
        escrow=parse_escrow_params(data.get("escrow", DEFAULT_ESCROW_PARAMS)),
        tokens=parse_token_params(data.get("tokens", DEFAULT_TOKEN_PARAMS)),
    )


def default_parameters() -> DeploymentParameters:
    """Return the documented default parameters."""
    return parameters_from_dict({})


def load_parameters(file_path: Optional[Union[Path, str]] = None) -> DeploymentParameters:
    """
    Load deployment parameters from a JSON file.

    Args:
        file_path: Path to parameter file (defaults to built-in parameters)

    Returns:
        DeploymentParameters

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is not valid JSON
        ValidationError: If the file content has the wrong shape
        KeyError: If a section is missing a required field
    """
    if file_path is None:
        return default_parameters()

    with open(file_path) as f:
        data = json.load(f)

    return parameters_from_dict(data)
