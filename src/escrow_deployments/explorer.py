"""Etherscan-compatible source verification for escrow-deployments library."""

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Union

import requests

from .constants import (
    DEFAULT_STATUS_MAX_POLLS,
    DEFAULT_STATUS_POLL_INTERVAL,
    ETHERSCAN_V2_API_URL,
)
from .exceptions import ArtifactNotFoundError, VerificationError
from .hardhat import encode_constructor_args, load_build_info, load_contract_artifact

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30

# Lower-cased fragments of explorer responses
_ALREADY_VERIFIED = "already verified"
_PENDING = "pending in queue"
_PASS = "pass - verified"
# The explorer has not indexed the contract's bytecode yet
_NOT_INDEXED = ("unable to locate contractcode", "does not have bytecode")


class EtherscanVerifier:
    """
    Submits hardhat build-info sources to an Etherscan v2 style API.

    A submission is accepted asynchronously: the API returns a GUID which is
    polled with checkverifystatus until the explorer reports pass or fail.
    """

    def __init__(
        self,
        api_key: str,
        chain_id: int,
        artifacts_dir: Union[Path, str],
        api_url: str = ETHERSCAN_V2_API_URL,
        session: Optional[requests.Session] = None,
        poll_interval: float = DEFAULT_STATUS_POLL_INTERVAL,
        max_polls: int = DEFAULT_STATUS_MAX_POLLS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = api_key
        self.chain_id = chain_id
        self.artifacts_dir = Path(artifacts_dir)
        self.api_url = api_url
        self.session = session or requests.Session()
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.sleep = sleep

    def _call(self, contract_name: str, method: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Make one API request.

        Raises:
            VerificationError: On transport or HTTP errors (retryable)
        """
        params = {"chainid": self.chain_id}
        payload = {"apikey": self.api_key, "module": "contract", **data}
        try:
            if method == "POST":
                response = self.session.post(
                    self.api_url, params=params, data=payload, timeout=REQUEST_TIMEOUT_SECONDS
                )
            else:
                response = self.session.get(
                    self.api_url, params={**params, **payload}, timeout=REQUEST_TIMEOUT_SECONDS
                )
        except requests.RequestException as e:
            raise VerificationError(
                contract_name, f"Network error during explorer call: {e}", retryable=True
            ) from e

        # Check for HTTP errors
        if response.status_code != 200:
            raise VerificationError(
                contract_name,
                f"Explorer request failed with status {response.status_code}",
                retryable=response.status_code >= 500 or response.status_code == 429,
            )

        try:
            return response.json()
        except ValueError as e:
            raise VerificationError(
                contract_name, "Explorer returned a non-JSON response", retryable=True
            ) from e

    def submit(self, address: str, constructor_args: Sequence[Any], contract_name: str) -> str:
        """
        Submit a verification request.

        Args:
            address: Deployed contract address
            constructor_args: Arguments the contract was deployed with
            contract_name: Compiled contract name

        Returns:
            Explorer GUID to poll, or "" if the contract is already verified

        Raises:
            VerificationError: If the request is rejected
        """
        try:
            compiled = load_contract_artifact(self.artifacts_dir, contract_name)
            build_info = load_build_info(compiled)
        except (ArtifactNotFoundError, KeyError) as e:
            raise VerificationError(contract_name, f"Compilation artifacts unusable: {e}") from e

        try:
            encoded_args = encode_constructor_args(compiled.abi, constructor_args)
        except (ValueError, TypeError) as e:
            raise VerificationError(contract_name, f"Cannot encode constructor arguments: {e}") from e

        result = self._call(
            contract_name,
            "POST",
            {
                "action": "verifysourcecode",
                "contractaddress": address,
                "sourceCode": json.dumps(build_info["input"]),
                "codeformat": "solidity-standard-json-input",
                "contractname": compiled.fully_qualified_name,
                "compilerversion": f"v{build_info['solcLongVersion']}",
                # Misspelling is part of the Etherscan API
                "constructorArguements": encoded_args,
            },
        )

        message = str(result.get("result", ""))
        if str(result.get("status")) == "1":
            return message

        lowered = message.lower()
        if _ALREADY_VERIFIED in lowered:
            return ""
        raise VerificationError(
            contract_name,
            message or str(result.get("message", "unknown error")),
            retryable=any(fragment in lowered for fragment in _NOT_INDEXED),
        )

    def check_status(self, guid: str, contract_name: str) -> str:
        """
        Poll a submission until the explorer decides.

        Returns:
            Final explorer message

        Raises:
            VerificationError: If verification failed or polling timed out
        """
        for _ in range(self.max_polls):
            result = self._call(
                contract_name, "GET", {"action": "checkverifystatus", "guid": guid}
            )
            message = str(result.get("result", ""))
            lowered = message.lower()

            if _PENDING in lowered:
                logger.debug("%s verification pending (%s)", contract_name, guid)
                self.sleep(self.poll_interval)
                continue
            if _PASS in lowered or _ALREADY_VERIFIED in lowered:
                return message
            raise VerificationError(contract_name, message or "unknown verification status")

        raise VerificationError(
            contract_name,
            f"Verification still pending after {self.max_polls} status checks",
            retryable=True,
        )

    def verify(self, address: str, constructor_args: Sequence[Any], contract_name: str) -> str:
        guid = self.submit(address, constructor_args, contract_name)
        if not guid:
            return "Already Verified"
        return self.check_status(guid, contract_name)
