"""Chain client interface and web3 implementation for escrow-deployments library."""

import logging
from pathlib import Path
from typing import Any, Optional, Protocol, Sequence, Tuple, Union

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from .exceptions import ConfigurationError
from .hardhat import load_contract_artifact

logger = logging.getLogger(__name__)

PROVIDER_TIMEOUT_SECONDS = 60
RECEIPT_TIMEOUT_SECONDS = 600


class ChainClient(Protocol):
    """What the orchestrator needs from a chain connection."""

    def get_signer(self) -> str:
        """Return the address of the deploying account."""
        ...

    def deploy_contract(
        self, contract_name: str, constructor_args: Sequence[Any]
    ) -> Tuple[str, Any]:
        """
        Deploy a compiled contract and wait for it to be mined.

        Returns:
            Tuple of (contract address, transaction receipt)
        """
        ...


class TransactionFailedError(RuntimeError):
    """Raised when a deployment transaction is mined but reverted."""

    pass


class Web3ChainClient:
    """Deploys hardhat-compiled contracts through a JSON-RPC endpoint."""

    def __init__(
        self,
        rpc_url: str,
        private_key: str,
        artifacts_dir: Union[Path, str],
        chain_id: Optional[int] = None,
        web3: Optional[Web3] = None,
        receipt_timeout: int = RECEIPT_TIMEOUT_SECONDS,
    ):
        self.w3 = web3 or Web3(
            Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": PROVIDER_TIMEOUT_SECONDS})
        )
        # Never echo the key back in an error message
        try:
            self.account: LocalAccount = Account.from_key(private_key)
        except (ValueError, TypeError):
            raise ConfigurationError("Invalid private key format (key not shown)") from None
        self.artifacts_dir = Path(artifacts_dir)
        self.chain_id = chain_id
        self.receipt_timeout = receipt_timeout

    def get_signer(self) -> str:
        return self.account.address

    def deploy_contract(
        self, contract_name: str, constructor_args: Sequence[Any]
    ) -> Tuple[str, Any]:
        """
        Build, sign and send a contract creation transaction.

        Args:
            contract_name: Name of a contract in the hardhat artifacts directory
            constructor_args: Constructor arguments in declaration order

        Returns:
            Tuple of (contract address, transaction receipt)

        Raises:
            ArtifactNotFoundError: If the contract was not compiled
            TransactionFailedError: If the transaction reverted
        """
        compiled = load_contract_artifact(self.artifacts_dir, contract_name)
        factory = self.w3.eth.contract(abi=compiled.abi, bytecode=compiled.bytecode)

        tx_params = {
            "from": self.account.address,
            "nonce": self.w3.eth.get_transaction_count(self.account.address, "pending"),
        }
        if self.chain_id is not None:
            tx_params["chainId"] = self.chain_id

        tx = factory.constructor(*constructor_args).build_transaction(tx_params)
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.debug("Sent %s deployment transaction %s", contract_name, tx_hash.hex())

        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        if receipt["status"] != 1:
            raise TransactionFailedError(
                f"Deployment transaction {tx_hash.hex()} for {contract_name} reverted"
            )

        return receipt["contractAddress"], receipt
