"""Configuration constants for escrow-deployments library."""

# Compiled contract names, as found in hardhat's artifacts/ tree
FORWARDER_CONTRACT = "ERC2771Forwarder"
ESCROW_CONTRACT = "Escrow"
TOKEN_CONTRACT = "CustomToken"

# Artifact file kinds -> filename prefix
ARTIFACT_PREFIXES = {
    "contracts": "deployedContracts",
    "tokens": "deployedTokens",
}

DEFAULT_ARTIFACTS_DIR = "deployments"
DEFAULT_HARDHAT_ARTIFACTS_DIR = "artifacts"

# Seconds to wait for the explorer's indexer before the first verification
DEFAULT_VERIFICATION_DELAY = 60

# Backoff between verification attempts (only used when retries are enabled)
DEFAULT_BACKOFF_INITIAL = 15.0
DEFAULT_BACKOFF_FACTOR = 2.0
DEFAULT_BACKOFF_MAX = 240.0

# Explorer status polling after a verification request was accepted
DEFAULT_STATUS_POLL_INTERVAL = 5.0
DEFAULT_STATUS_MAX_POLLS = 24

ETHERSCAN_V2_API_URL = "https://api.etherscan.io/v2/api"

DEFAULT_ESCROW_PARAMS = {
    "minSubmissionDeadlineDays": 1,
    "minReviewDeadlineDays": 7,
    "minPaymentDeadlineDays": 7,
    "lockPeriodDays": 270,
    "deadlineExtensionPeriodDays": 14,
}

DEFAULT_FORWARDER_PARAMS = {
    "name": "ERC2771Forwarder",
}

# Test tokens, only deployed on request
DEFAULT_TOKEN_PARAMS = [
    {
        "name": "USD Coin",
        "symbol": "USDC",
        "initialSupply": "1000000000",  # 1000 USDC at 6 decimals
        "customDecimals": 6,
    },
    {
        "name": "Tether USD",
        "symbol": "USDT",
        "initialSupply": "1000000000",  # 1000 USDT at 6 decimals
        "customDecimals": 6,
    },
    {
        "name": "JPY Coin",
        "symbol": "JPYC",
        "initialSupply": "1000000000000000000000",  # 1000 JPYC at 18 decimals
        "customDecimals": 18,
    },
]

MAX_TOKEN_DECIMALS = 18

# Networks the pipeline knows how to target.
# explorer_api_key_env is None where no verification service exists.
NETWORK_CONFIG = {
    "polygon": {
        "chain_id": 137,
        "chain_name": "Polygon PoS",
        "block_explorer_url": "https://polygonscan.com",
        "default_rpc_env": "POLYGON_RPC_URL",
        "explorer_api_key_env": "POLYGONSCAN_API_KEY",
    },
    "polygonMumbai": {
        "chain_id": 80001,
        "chain_name": "Polygon Mumbai",
        "block_explorer_url": "https://mumbai.polygonscan.com",
        "default_rpc_env": "MUMBAI_RPC_URL",
        "explorer_api_key_env": "POLYGONSCAN_API_KEY",
    },
    "polygonAmoy": {
        "chain_id": 80002,
        "chain_name": "Polygon Amoy",
        "block_explorer_url": "https://amoy.polygonscan.com",
        "default_rpc_env": "AMOY_RPC_URL",
        "explorer_api_key_env": "POLYGONSCAN_API_KEY",
    },
    "sepolia": {
        "chain_id": 11155111,
        "chain_name": "Sepolia",
        "block_explorer_url": "https://sepolia.etherscan.io",
        "default_rpc_env": "SEPOLIA_RPC_URL",
        "explorer_api_key_env": "ETHERSCAN_API_KEY",
    },
    "hardhat": {
        "chain_id": 31337,
        "chain_name": "Hardhat Network",
        "block_explorer_url": None,
        "default_rpc_env": "HARDHAT_RPC_URL",
        "explorer_api_key_env": None,
    },
}

PRIVATE_KEY_ENV = "PRIVATE_KEY"
