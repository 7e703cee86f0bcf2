"""Dependency-ordered contract deployment for escrow-deployments library."""

import logging
from typing import Any, List, Sequence

from .chain import ChainClient
from .constants import ESCROW_CONTRACT, FORWARDER_CONTRACT, TOKEN_CONTRACT
from .exceptions import DeploymentError
from .types import DeployedContract, DeploymentParameters, DeploymentResult
from .validation import validate_address

logger = logging.getLogger(__name__)


def _deploy_one(
    chain_client: ChainClient,
    logical_name: str,
    contract_name: str,
    constructor_args: Sequence[Any],
) -> DeployedContract:
    """
    Deploy a single contract.

    Raises:
        DeploymentError: Wrapping whatever the chain client raised
    """
    logger.info("Deploying %s (%s)", logical_name, contract_name)
    try:
        address, _receipt = chain_client.deploy_contract(contract_name, list(constructor_args))
        address = validate_address(address)
    except Exception as e:
        raise DeploymentError(logical_name, e) from e

    return DeployedContract(
        logical_name=logical_name,
        contract_name=contract_name,
        address=address,
        constructor_args=tuple(constructor_args),
    )


def deploy(
    params: DeploymentParameters,
    chain_client: ChainClient,
    network: str,
    include_tokens: bool = False,
) -> DeploymentResult:
    """
    Deploy forwarder, escrow and optionally tokens, strictly in that order.

    The escrow constructor receives the address the forwarder deployment
    returned. The first failure stops the sequence; contracts deployed
    before it stay on the result so they can still be persisted. Deployment
    steps are never retried.

    Args:
        params: Validated deployment parameters
        chain_client: Connection used to send deployment transactions
        network: Network name, for logging and the result
        include_tokens: Also deploy params.tokens, in table order

    Returns:
        DeploymentResult with deployed contracts and the halting error, if any
    """
    result = DeploymentResult(network=network)

    try:
        result.signer = chain_client.get_signer()
    except Exception as e:
        result.error = DeploymentError(FORWARDER_CONTRACT, e)
        logger.error("Could not resolve deploying account on %s: %s", network, e)
        return result

    logger.info("Deploying contracts with the account: %s on %s", result.signer, network)

    steps: List[tuple] = [
        (FORWARDER_CONTRACT, FORWARDER_CONTRACT, None),
        (ESCROW_CONTRACT, ESCROW_CONTRACT, None),
    ]
    if include_tokens:
        for token in params.tokens:
            steps.append((token.symbol, TOKEN_CONTRACT, token))

    for logical_name, contract_name, token in steps:
        # Arguments are resolved lazily so escrow sees the real forwarder address
        if contract_name == FORWARDER_CONTRACT:
            args = [params.forwarder.name]
        elif contract_name == ESCROW_CONTRACT:
            args = params.escrow.constructor_args(result.forwarder_address)
        else:
            args = token.constructor_args()

        try:
            deployed = _deploy_one(chain_client, logical_name, contract_name, args)
        except DeploymentError as e:
            result.error = e
            logger.error(
                "%s deployment failed on %s, skipping %d remaining step(s): %s",
                logical_name,
                network,
                len(steps) - len(result.contracts) - 1,
                e.cause,
            )
            break

        result.contracts.append(deployed)
        logger.info("%s deployed to: %s", logical_name, deployed.address)

    return result
