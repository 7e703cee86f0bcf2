"""Deployed-address artifact persistence for escrow-deployments library."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from .exceptions import PersistenceError
from .paths import get_artifact_filename, get_artifact_path, get_default_artifacts_dir

logger = logging.getLogger(__name__)


class ArtifactStore(Protocol):
    """Somewhere artifact files can be written."""

    def write(self, path: str, content: str) -> Path:
        """Write content to a store-relative path, replacing any previous content."""
        ...


class FileArtifactStore:
    """Writes artifact files below a root directory on the local filesystem."""

    def __init__(self, root: Optional[Union[Path, str]] = None):
        self.root = get_default_artifacts_dir() if root is None else Path(root).absolute()

    def write(self, path: str, content: str) -> Path:
        """
        Atomically replace a file below the store root.

        Args:
            path: Path relative to the store root
            content: Text to write

        Returns:
            Absolute path of the written file

        Raises:
            OSError: If the directory or file cannot be written
        """
        target = self.root / path
        # Creates parent directories if they don't exist
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(content)
            os.replace(tmp_name, target)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        return target


def serialize_artifacts(artifacts: Dict[str, str]) -> str:
    # Keys stay in deployment order
    return json.dumps(artifacts, indent=2) + "\n"


def persist_artifacts(
    network: str,
    artifacts: Dict[str, str],
    store: ArtifactStore,
    kind: str = "contracts",
) -> Path:
    """
    Persist the deployed addresses of one network.

    A previous file for the same network and kind is overwritten, never
    merged.

    Args:
        network: Network name
        artifacts: Logical name -> address, in deployment order
        store: Destination store
        kind: "contracts" or "tokens"

    Returns:
        Path of the written file

    Raises:
        PersistenceError: If the file cannot be written
    """
    filename = get_artifact_filename(network, kind)
    content = serialize_artifacts(artifacts)

    try:
        path = store.write(filename, content)
    except OSError as e:
        root = getattr(store, "root", None)
        raise PersistenceError(Path(root) / filename if root else filename, e) from e

    logger.info("Deployed %s addresses have been saved to %s", kind, path)
    return path


def load_artifacts(
    network: str,
    kind: str = "contracts",
    artifacts_root: Optional[Union[Path, str]] = None,
) -> Dict[str, str]:
    """
    Read a persisted artifact file back.

    Args:
        network: Network name
        kind: "contracts" or "tokens"
        artifacts_root: Artifact directory (defaults to ./deployments)

    Returns:
        Logical name -> address, in file order

    Raises:
        FileNotFoundError: If no artifact exists for the network
        ValueError: If the file is not a JSON object of name -> address strings
    """
    path = get_artifact_path(network, kind, artifacts_root)
    with open(path) as f:
        data = json.load(f)

    if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
        raise ValueError(f"{path} is not a JSON object of name -> address")
    return data
