"""Command line entry point for escrow-deployments library."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from .chain import Web3ChainClient
from .config import PipelineConfig, load_config
from .constants import DEFAULT_VERIFICATION_DELAY, NETWORK_CONFIG
from .exceptions import ConfigurationError, ValidationError
from .explorer import EtherscanVerifier
from .parameters import load_parameters
from .pipeline import contracts_from_artifacts, run
from .store import FileArtifactStore, load_artifacts
from .types import EXIT_FAILURE, EXIT_INVALID_CONFIG, EXIT_OK, DeploymentParameters
from .validation import validate
from .verification import verify_all

logger = logging.getLogger("escrow_deployments")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="escrow-deploy",
        description="Deploy the forwarder and escrow contracts, save their addresses "
        "and verify their sources on the block explorer.",
    )
    parser.add_argument("--network", required=True, choices=sorted(NETWORK_CONFIG))
    parser.add_argument("--params", help="JSON parameter file (defaults to built-in parameters)")
    parser.add_argument("--rpc-url", help="RPC endpoint (defaults to the network's env variable)")
    parser.add_argument(
        "--hardhat-artifacts", default=None, help="hardhat artifacts directory (./artifacts)"
    )
    parser.add_argument(
        "--output-dir", default=None, help="directory for address files (./deployments)"
    )
    parser.add_argument(
        "--with-tokens",
        action="store_true",
        help="also deploy test tokens (with --verify-only: also verify recorded tokens)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--skip-verify", action="store_true", help="do not verify sources")
    mode.add_argument(
        "--verify-only",
        action="store_true",
        help="verify contracts already recorded in the address files",
    )
    parser.add_argument(
        "--verification-delay",
        type=float,
        default=DEFAULT_VERIFICATION_DELAY,
        help="seconds to wait for the explorer indexer (default: %(default)s)",
    )
    parser.add_argument(
        "--verification-attempts",
        type=int,
        default=1,
        help="attempts per contract for transient failures (default: %(default)s)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def _verifier(config: PipelineConfig) -> EtherscanVerifier:
    return EtherscanVerifier(
        api_key=config.explorer_api_key,
        chain_id=config.chain_id,
        artifacts_dir=config.hardhat_artifacts_dir,
        api_url=config.explorer_api_url,
    )


def _verify_only(
    config: PipelineConfig, params: DeploymentParameters, include_tokens: bool
) -> int:
    try:
        core = load_artifacts(config.network, "contracts", config.output_dir)
    except FileNotFoundError as e:
        logger.error("No deployed contracts recorded for %s: %s", config.network, e)
        return EXIT_FAILURE
    except ValueError as e:
        logger.error("Unreadable contract addresses for %s: %s", config.network, e)
        return EXIT_FAILURE

    # Recorded tokens are verified only with --with-tokens
    tokens = {}
    if include_tokens:
        try:
            tokens = load_artifacts(config.network, "tokens", config.output_dir)
        except FileNotFoundError:
            logger.warning("No deployed tokens recorded for %s", config.network)
        except ValueError as e:
            logger.error("Unreadable token addresses for %s: %s", config.network, e)
            return EXIT_FAILURE

    try:
        contracts = contracts_from_artifacts(params, core, tokens)
    except ValidationError as e:
        logger.error("Recorded addresses for %s are invalid: %s", config.network, e)
        return EXIT_INVALID_CONFIG

    if not contracts:
        logger.error("Nothing to verify: no recorded contracts for %s", config.network)
        return EXIT_FAILURE

    outcomes = verify_all(
        contracts,
        _verifier(config),
        delay=0,
        max_attempts=config.max_verification_attempts,
    )
    print(
        json.dumps(
            {o.logical_name: o.status.value if o.verified else o.reason for o in outcomes},
            indent=2,
        )
    )
    return EXIT_OK if all(o.verified for o in outcomes) else EXIT_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Fill gaps from ./.env; variables already set in the environment win
    load_dotenv(find_dotenv(usecwd=True))

    try:
        params = load_parameters(args.params)
        validate(params)
        config = load_config(
            args.network,
            rpc_url=args.rpc_url,
            verify=not args.skip_verify,
            hardhat_artifacts_dir=args.hardhat_artifacts,
            output_dir=args.output_dir,
            verification_delay=args.verification_delay,
            max_verification_attempts=args.verification_attempts,
        )
    except (ConfigurationError, ValidationError) as e:
        logger.error("%s", e)
        return EXIT_INVALID_CONFIG
    except (OSError, ValueError, KeyError) as e:
        logger.error("Could not load parameters from %s: %s", args.params, e)
        return EXIT_INVALID_CONFIG

    if args.verify_only:
        return _verify_only(config, params, args.with_tokens)

    try:
        chain_client = Web3ChainClient(
            config.rpc_url,
            config.private_key,
            config.hardhat_artifacts_dir,
            chain_id=config.chain_id,
        )
    except ConfigurationError as e:
        logger.error("%s", e)
        return EXIT_INVALID_CONFIG

    report = run(
        params,
        chain_client,
        _verifier(config) if config.verify else None,
        FileArtifactStore(config.output_dir),
        config.network,
        include_tokens=args.with_tokens,
        verify=config.verify,
        verification_delay=config.verification_delay,
        max_verification_attempts=config.max_verification_attempts,
    )

    print(json.dumps(report.summary(), indent=2))
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
