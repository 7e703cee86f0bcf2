"""Integration tests for the deploy, persist and verify pipeline."""

import json
from dataclasses import replace
from pathlib import Path

import pytest

from escrow_deployments import EXIT_FAILURE, EXIT_OK, EXIT_PARTIAL
from escrow_deployments.exceptions import ValidationError, VerificationError
from escrow_deployments.pipeline import contracts_from_artifacts, run
from escrow_deployments.store import FileArtifactStore, load_artifacts
from escrow_deployments.types import VerificationStatus

FORWARDER_ADDRESS = "0x0000000000000000000000000000000000000001"
ESCROW_ADDRESS = "0x0000000000000000000000000000000000000002"


class FailingStore:
    """Artifact store whose writes always fail."""

    root = Path("/read-only")

    def write(self, path, content):
        raise PermissionError(13, "Permission denied", path)


@pytest.fixture
def store(temp_artifacts_dir: Path) -> FileArtifactStore:
    return FileArtifactStore(temp_artifacts_dir)


class TestEndToEnd:
    """Test the full happy path against stub chain and explorer."""

    def test_deploys_persists_and_verifies(
        self, default_params, chain_client, verifier, store, temp_artifacts_dir, no_sleep
    ):
        report = run(default_params, chain_client, verifier, store, "polygonMumbai", sleep=no_sleep)

        artifact_file = temp_artifacts_dir / "deployedContracts-polygonMumbai.json"
        assert json.loads(artifact_file.read_text()) == {
            "ERC2771Forwarder": FORWARDER_ADDRESS,
            "Escrow": ESCROW_ADDRESS,
        }
        assert report.artifact_paths == [artifact_file]
        assert [o.status for o in report.outcomes] == [VerificationStatus.VERIFIED] * 2
        assert no_sleep.calls == [60]
        assert report.exit_code == EXIT_OK

    def test_verifier_receives_deployed_arguments(
        self, default_params, chain_client, verifier, store, no_sleep
    ):
        run(default_params, chain_client, verifier, store, "polygonMumbai", sleep=no_sleep)

        assert verifier.calls == [
            (FORWARDER_ADDRESS, ["ERC2771Forwarder"], "ERC2771Forwarder"),
            (ESCROW_ADDRESS, [FORWARDER_ADDRESS, 1, 7, 7, 270, 14], "Escrow"),
        ]

    def test_file_is_pretty_printed(self, default_params, chain_client, verifier, store, no_sleep):
        report = run(default_params, chain_client, verifier, store, "hardhat", sleep=no_sleep)

        text = report.artifact_paths[0].read_text()
        assert text.startswith('{\n  "ERC2771Forwarder"')

    def test_rerun_overwrites_previous_file(
        self, default_params, make_chain_client, verifier, store, temp_artifacts_dir, no_sleep
    ):
        artifact_file = temp_artifacts_dir / "deployedContracts-hardhat.json"
        temp_artifacts_dir.mkdir()
        artifact_file.write_text(json.dumps({"Stale": "0x" + "f" * 40, "Escrow": "0x" + "e" * 40}))

        run(default_params, make_chain_client(), verifier, store, "hardhat", sleep=no_sleep)

        assert json.loads(artifact_file.read_text()) == {
            "ERC2771Forwarder": FORWARDER_ADDRESS,
            "Escrow": ESCROW_ADDRESS,
        }

    def test_networks_use_separate_files(
        self, default_params, make_chain_client, verifier, store, temp_artifacts_dir, no_sleep
    ):
        run(default_params, make_chain_client(), verifier, store, "hardhat", sleep=no_sleep)
        run(default_params, make_chain_client(), verifier, store, "polygon", sleep=no_sleep)

        assert sorted(p.name for p in temp_artifacts_dir.iterdir()) == [
            "deployedContracts-hardhat.json",
            "deployedContracts-polygon.json",
        ]


class TestTokens:
    """Test the optional token batch."""

    def test_token_file_written(
        self, default_params, chain_client, verifier, store, temp_artifacts_dir, no_sleep
    ):
        report = run(
            default_params,
            chain_client,
            verifier,
            store,
            "hardhat",
            include_tokens=True,
            sleep=no_sleep,
        )

        tokens = load_artifacts("hardhat", "tokens", temp_artifacts_dir)
        assert list(tokens) == ["USDC", "USDT", "JPYC"]
        assert len(report.artifact_paths) == 2
        assert len(report.outcomes) == 5
        assert verifier.calls[2][2] == "CustomToken"

    def test_no_token_file_without_flag(
        self, default_params, chain_client, verifier, store, temp_artifacts_dir, no_sleep
    ):
        run(default_params, chain_client, verifier, store, "hardhat", sleep=no_sleep)

        assert not (temp_artifacts_dir / "deployedTokens-hardhat.json").exists()


class TestFailures:
    """Test partial and failed runs."""

    def test_escrow_failure_persists_and_verifies_forwarder(
        self, default_params, make_chain_client, verifier, store, temp_artifacts_dir, no_sleep
    ):
        report = run(
            default_params,
            make_chain_client(fail_on="Escrow"),
            verifier,
            store,
            "polygonMumbai",
            sleep=no_sleep,
        )

        saved = load_artifacts("polygonMumbai", "contracts", temp_artifacts_dir)
        assert saved == {"ERC2771Forwarder": FORWARDER_ADDRESS}
        assert [call[2] for call in verifier.calls] == ["ERC2771Forwarder"]
        assert report.exit_code == EXIT_PARTIAL

    def test_forwarder_failure_writes_nothing(
        self, default_params, make_chain_client, verifier, store, temp_artifacts_dir, no_sleep
    ):
        report = run(
            default_params,
            make_chain_client(fail_on="ERC2771Forwarder"),
            verifier,
            store,
            "polygonMumbai",
            sleep=no_sleep,
        )

        assert not temp_artifacts_dir.exists()
        assert verifier.calls == []
        assert no_sleep.calls == []
        assert report.exit_code == EXIT_FAILURE

    def test_invalid_parameters_fail_before_any_chain_call(
        self, default_params, chain_client, verifier, store
    ):
        params = replace(default_params, escrow=replace(default_params.escrow, lock_period_days=-1))

        with pytest.raises(ValidationError):
            run(params, chain_client, verifier, store, "hardhat")

        assert chain_client.calls == []

    def test_persistence_failure_still_verifies(
        self, default_params, chain_client, verifier, no_sleep
    ):
        report = run(default_params, chain_client, verifier, FailingStore(), "hardhat", sleep=no_sleep)

        assert len(report.persistence_errors) == 1
        assert "deployedContracts-hardhat.json" in str(report.persistence_errors[0])
        assert len(verifier.calls) == 2
        assert report.exit_code == EXIT_FAILURE

    def test_verification_failure_keeps_exit_code(
        self, default_params, chain_client, make_verifier, store, no_sleep
    ):
        verifier = make_verifier(
            fail={ESCROW_ADDRESS: VerificationError("Escrow", "Fail - Unable to verify")}
        )

        report = run(default_params, chain_client, verifier, store, "hardhat", sleep=no_sleep)

        assert [o.logical_name for o in report.failed_verifications] == ["Escrow"]
        assert report.exit_code == EXIT_OK


class TestVerificationSwitch:
    """Test running with verification disabled."""

    def test_skip_verify_needs_no_verifier(self, default_params, chain_client, store, no_sleep):
        report = run(
            default_params, chain_client, None, store, "hardhat", verify=False, sleep=no_sleep
        )

        assert report.outcomes == []
        assert no_sleep.calls == []
        assert report.exit_code == EXIT_OK

    def test_verify_without_verifier_is_rejected(self, default_params, chain_client, store):
        with pytest.raises(ValueError):
            run(default_params, chain_client, None, store, "hardhat")

        assert chain_client.calls == []


class TestContractsFromArtifacts:
    """Test rebuilding contracts for verify-only runs."""

    def test_rebuilds_constructor_arguments(self, default_params):
        contracts = contracts_from_artifacts(
            default_params,
            {"ERC2771Forwarder": FORWARDER_ADDRESS, "Escrow": ESCROW_ADDRESS},
            {"JPYC": "0x0000000000000000000000000000000000000005"},
        )

        assert [c.logical_name for c in contracts] == ["ERC2771Forwarder", "Escrow", "JPYC"]
        assert contracts[1].constructor_args == (FORWARDER_ADDRESS, 1, 7, 7, 270, 14)
        assert contracts[2].constructor_args == ("JPY Coin", "JPYC", 10**21, 18)

    def test_escrow_without_forwarder_is_skipped(self, default_params):
        assert contracts_from_artifacts(default_params, {"Escrow": ESCROW_ADDRESS}) == []

    def test_invalid_recorded_address(self, default_params):
        with pytest.raises(ValidationError):
            contracts_from_artifacts(default_params, {"ERC2771Forwarder": "0x1234"})
