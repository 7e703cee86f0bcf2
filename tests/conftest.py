"""Shared pytest fixtures for escrow-deployments tests."""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from escrow_deployments.exceptions import VerificationError
from escrow_deployments.parameters import default_parameters
from escrow_deployments.types import DeploymentParameters


class StubChainClient:
    """Returns deterministic addresses and records every deployment call."""

    def __init__(
        self,
        fail_on: Optional[str] = None,
        signer: str = "0x00000000000000000000000000000000000000aa",
    ):
        self.fail_on = fail_on
        self.signer = signer
        self.calls: List[Tuple[str, List[Any]]] = []

    def get_signer(self) -> str:
        return self.signer

    def deploy_contract(self, contract_name: str, constructor_args: Sequence[Any]):
        self.calls.append((contract_name, list(constructor_args)))
        if contract_name == self.fail_on:
            raise RuntimeError(f"{contract_name} constructor reverted")
        address = f"0x{len(self.calls):040x}"
        return address, {"status": 1, "contractAddress": address}


class StubVerifier:
    """Succeeds unless the address is listed in `fail`."""

    def __init__(self, fail: Optional[Dict[str, VerificationError]] = None):
        self.fail = fail or {}
        self.calls: List[Tuple[str, List[Any], str]] = []

    def verify(self, address: str, constructor_args: Sequence[Any], contract_name: str) -> str:
        self.calls.append((address, list(constructor_args), contract_name))
        if address in self.fail:
            raise self.fail[address]
        return "Pass - Verified"


class RecordingSleep:
    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def hardhat_artifacts_dir(fixtures_dir: Path) -> Path:
    """Return the sample hardhat artifacts directory."""
    return fixtures_dir / "artifacts"


@pytest.fixture
def parameters_file(fixtures_dir: Path) -> Path:
    return fixtures_dir / "deploy_parameters.json"


@pytest.fixture
def default_params() -> DeploymentParameters:
    return default_parameters()


@pytest.fixture
def chain_client() -> StubChainClient:
    return StubChainClient()


@pytest.fixture
def verifier() -> StubVerifier:
    return StubVerifier()


@pytest.fixture
def no_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def temp_artifacts_dir(tmp_path: Path) -> Path:
    """Return a not-yet-created artifact directory."""
    return tmp_path / "deployments"


@pytest.fixture
def make_chain_client():
    """Factory for stub chain clients, e.g. make_chain_client(fail_on="Escrow")."""
    return StubChainClient


@pytest.fixture
def make_verifier():
    """Factory for stub verifiers, e.g. make_verifier(fail={address: error})."""
    return StubVerifier
