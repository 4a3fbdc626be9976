import os
from typing import Optional

from dotenv import load_dotenv

from distributor.errors import MissingEnvironmentVariableException

load_dotenv()


def env_var(accessor: str, default: Optional[str] = None) -> str:
    """
    Attempt to fetch an environment variable and throw
    an error if not found and no default is given
    """
    var = os.environ.get(accessor, default)
    if not var:
        raise MissingEnvironmentVariableException(accessor)
    return var


def optional_env_var(accessor: str) -> Optional[str]:
    return os.environ.get(accessor) or None


class STATS_API:
    MAINNET = env_var("ZWAP_STATS_API_MAINNET", "https://stats.zilswap.org")
    TESTNET = env_var("ZWAP_STATS_API_TESTNET", "https://test-stats.zilswap.org")


class RPC:
    MAINNET = env_var("ZILLIQA_RPC_MAINNET", "https://api.zilliqa.com")
    TESTNET = env_var("ZILLIQA_RPC_TESTNET", "https://dev-api.zilliqa.com")


# distributor contracts are deployment specific, so there are no defaults
class DIST_CONTRACT:
    MAINNET = optional_env_var("DIST_CONTRACT_MAINNET")
    TESTNET = optional_env_var("DIST_CONTRACT_TESTNET")


NETWORK = env_var("ZWAP_NETWORK", "MainNet")
