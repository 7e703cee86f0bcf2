"""Unit tests for the verification coordinator."""

import logging

import pytest

from escrow_deployments.exceptions import VerificationError
from escrow_deployments.types import DeployedContract, VerificationStatus
from escrow_deployments.verification import backoff_delay, verify_all, verify_contract


def _contract(index: int, name: str = None) -> DeployedContract:
    return DeployedContract(
        logical_name=name or f"Contract{index}",
        contract_name=name or f"Contract{index}",
        address=f"0x{index:040x}",
        constructor_args=(f"arg{index}", index),
    )


@pytest.fixture
def contracts():
    return [_contract(i) for i in range(1, 5)]


class TestIndexerWait:
    """Test the one-off wait before the first verification."""

    def test_waits_once_per_run(self, contracts, verifier, no_sleep):
        verify_all(contracts, verifier, delay=60, sleep=no_sleep)

        assert no_sleep.calls == [60]

    def test_no_wait_without_contracts(self, verifier, no_sleep):
        assert verify_all([], verifier, delay=60, sleep=no_sleep) == []
        assert no_sleep.calls == []

    def test_zero_delay_skips_wait(self, contracts, verifier, no_sleep):
        verify_all(contracts, verifier, delay=0, sleep=no_sleep)

        assert no_sleep.calls == []


class TestVerifyAll:
    """Test ordering and failure isolation."""

    def test_verifies_in_deployment_order(self, contracts, verifier, no_sleep):
        verify_all(contracts, verifier, sleep=no_sleep)

        assert [call[0] for call in verifier.calls] == [c.address for c in contracts]

    def test_passes_exact_constructor_arguments(self, contracts, verifier, no_sleep):
        verify_all(contracts, verifier, sleep=no_sleep)

        assert verifier.calls[2] == ("0x" + "3".rjust(40, "0"), ["arg3", 3], "Contract3")

    def test_all_verified(self, contracts, verifier, no_sleep):
        outcomes = verify_all(contracts, verifier, sleep=no_sleep)

        assert [o.status for o in outcomes] == [VerificationStatus.VERIFIED] * 4
        assert all(o.reason is None for o in outcomes)

    def test_failure_does_not_stop_later_contracts(self, contracts, make_verifier, no_sleep):
        """Test that contract k failing still yields N outcomes."""
        failing = contracts[1]
        verifier = make_verifier(
            fail={failing.address: VerificationError(failing.logical_name, "Fail - Unable to verify")}
        )

        outcomes = verify_all(contracts, verifier, sleep=no_sleep)

        assert len(verifier.calls) == 4
        assert len(outcomes) == 4
        assert [o.verified for o in outcomes] == [True, False, True, True]
        assert outcomes[1].reason == "Fail - Unable to verify"
        assert outcomes[1].logical_name == "Contract2"

    def test_unexpected_exception_is_recorded(self, contracts, make_verifier, no_sleep):
        verifier = make_verifier(fail={contracts[0].address: RuntimeError("boom")})

        outcomes = verify_all(contracts, verifier, sleep=no_sleep)

        assert outcomes[0].status is VerificationStatus.FAILED
        assert outcomes[0].reason == "boom"
        assert all(o.verified for o in outcomes[1:])

    def test_logs_one_line_per_contract(self, contracts, make_verifier, no_sleep, caplog):
        verifier = make_verifier(
            fail={contracts[0].address: VerificationError("Contract1", "bytecode mismatch")}
        )

        with caplog.at_level(logging.INFO, logger="escrow_deployments.verification"):
            verify_all(contracts, verifier, delay=0, sleep=no_sleep)

        per_contract = [r for r in caplog.records if "Verification" in r.getMessage()]
        assert len(per_contract) == 4
        assert "bytecode mismatch" in per_contract[0].getMessage()


class TestRetries:
    """Test the opt-in bounded backoff."""

    def test_no_retry_by_default(self, make_verifier, no_sleep):
        contract = _contract(1)
        verifier = make_verifier(
            fail={contract.address: VerificationError("C", "not indexed", retryable=True)}
        )

        outcome = verify_contract(contract, verifier, sleep=no_sleep)

        assert len(verifier.calls) == 1
        assert outcome.attempts == 1
        assert no_sleep.calls == []

    def test_retries_retryable_failures_with_backoff(self, make_verifier, no_sleep):
        contract = _contract(1)
        verifier = make_verifier(
            fail={contract.address: VerificationError("C", "not indexed", retryable=True)}
        )

        outcome = verify_contract(
            contract, verifier, max_attempts=4, sleep=no_sleep, backoff=lambda n: 10 * 2 ** (n - 1)
        )

        assert len(verifier.calls) == 4
        assert no_sleep.calls == [10, 20, 40]
        assert outcome.status is VerificationStatus.FAILED
        assert outcome.attempts == 4

    def test_does_not_retry_permanent_failures(self, make_verifier, no_sleep):
        contract = _contract(1)
        verifier = make_verifier(fail={contract.address: VerificationError("C", "Fail")})

        outcome = verify_contract(contract, verifier, max_attempts=5, sleep=no_sleep)

        assert len(verifier.calls) == 1
        assert outcome.attempts == 1

    def test_succeeds_after_transient_failure(self, make_verifier, no_sleep):
        contract = _contract(1)

        class FlakyVerifier(make_verifier):
            def verify(self, address, constructor_args, contract_name):
                if not self.calls:
                    self.calls.append((address, list(constructor_args), contract_name))
                    raise VerificationError(contract_name, "not indexed", retryable=True)
                return super().verify(address, constructor_args, contract_name)

        verifier = FlakyVerifier()
        outcome = verify_contract(contract, verifier, max_attempts=3, sleep=no_sleep)

        assert outcome.verified
        assert outcome.attempts == 2
        assert len(no_sleep.calls) == 1

    def test_connection_errors_are_retryable(self, make_verifier, no_sleep):
        contract = _contract(1)
        verifier = make_verifier(fail={contract.address: ConnectionError("reset")})

        outcome = verify_contract(contract, verifier, max_attempts=2, sleep=no_sleep)

        assert outcome.attempts == 2


class TestBackoffDelay:
    """Test the backoff schedule."""

    def test_exponential_growth(self):
        assert [backoff_delay(n, initial=1, factor=2, maximum=100) for n in range(1, 5)] == [
            1,
            2,
            4,
            8,
        ]

    def test_capped_at_maximum(self):
        assert backoff_delay(10, initial=15, factor=2, maximum=240) == 240
