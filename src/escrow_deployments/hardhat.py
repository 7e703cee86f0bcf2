"""Hardhat compilation artifact parsers for escrow-deployments library."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from eth_abi import encode

from .exceptions import ArtifactNotFoundError


@dataclass(frozen=True)
class CompiledContract:
    """A contract as compiled by hardhat."""

    contract_name: str  # e.g. "Escrow"
    source_name: str  # e.g. "contracts/Escrow.sol"
    abi: List[Dict[str, Any]]
    bytecode: str
    artifact_path: Path

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"


def find_contract_artifact(artifacts_dir: Union[Path, str], contract_name: str) -> Path:
    """
    Locate the artifact JSON of a contract.

    Hardhat writes artifacts to artifacts/<sourceName>/<ContractName>.json,
    next to a <ContractName>.dbg.json debug file.

    Args:
        artifacts_dir: Hardhat artifacts directory
        contract_name: Contract name (not fully qualified)

    Returns:
        Path to the artifact file

    Raises:
        ArtifactNotFoundError: If no artifact or more than one artifact matches
    """
    artifacts_dir = Path(artifacts_dir)
    candidates = [
        p
        for p in artifacts_dir.rglob(f"{contract_name}.json")
        if "build-info" not in p.parts
    ]

    if not candidates:
        raise ArtifactNotFoundError(
            f"No artifact for contract '{contract_name}' under {artifacts_dir}. "
            "Run `npx hardhat compile` first."
        )
    if len(candidates) > 1:
        paths = ", ".join(str(p) for p in sorted(candidates))
        raise ArtifactNotFoundError(f"Ambiguous artifact for contract '{contract_name}': {paths}")

    return candidates[0]


def load_contract_artifact(artifacts_dir: Union[Path, str], contract_name: str) -> CompiledContract:
    """
    Parse the hardhat artifact of a contract.

    Args:
        artifacts_dir: Hardhat artifacts directory
        contract_name: Contract name

    Returns:
        CompiledContract

    Raises:
        ArtifactNotFoundError: If the artifact is missing
        KeyError: If the artifact lacks abi or bytecode
    """
    artifact_path = find_contract_artifact(artifacts_dir, contract_name)

    with open(artifact_path) as f:
        data = json.load(f)

    return CompiledContract(
        contract_name=data.get("contractName", contract_name),
        source_name=data["sourceName"],
        abi=data["abi"],
        bytecode=data["bytecode"],
        artifact_path=artifact_path,
    )


def load_build_info(compiled: CompiledContract) -> Dict[str, Any]:
    """
    Load the build-info file a contract was compiled in.

    The debug file next to the artifact points at the build-info file
    with a path relative to itself.

    Args:
        compiled: Contract returned by load_contract_artifact()

    Returns:
        Build-info dict with "solcLongVersion" and "input" (standard JSON input)

    Raises:
        ArtifactNotFoundError: If the debug or build-info file is missing
    """
    dbg_path = compiled.artifact_path.with_name(f"{compiled.contract_name}.dbg.json")
    if not dbg_path.exists():
        raise ArtifactNotFoundError(f"Missing debug file {dbg_path}")

    with open(dbg_path) as f:
        build_info_ref = json.load(f)["buildInfo"]

    build_info_path = (dbg_path.parent / build_info_ref).resolve()
    if not build_info_path.exists():
        raise ArtifactNotFoundError(f"Missing build-info file {build_info_path}")

    with open(build_info_path) as f:
        return json.load(f)


def constructor_input_types(abi: List[Dict[str, Any]]) -> List[str]:
    """Return the ABI types of the constructor inputs (empty without a constructor)."""
    for item in abi:
        if item.get("type") == "constructor":
            return [inp["type"] for inp in item.get("inputs", [])]
    return []


def encode_constructor_args(abi: List[Dict[str, Any]], args: Optional[Sequence[Any]]) -> str:
    """
    ABI-encode constructor arguments as verification services expect them.

    Args:
        abi: Contract ABI
        args: Constructor arguments, in declaration order

    Returns:
        Hex string without 0x prefix (empty for no arguments)

    Raises:
        ValueError: If the argument count does not match the constructor
    """
    types = constructor_input_types(abi)
    args = list(args or [])

    if len(types) != len(args):
        raise ValueError(
            f"Constructor takes {len(types)} arguments, {len(args)} given"
        )
    if not types:
        return ""

    return encode(types, args).hex()
