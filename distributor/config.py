import json
from decimal import Decimal
from pathlib import Path
from typing import Optional

from distributor import env
from distributor.errors import BadConfigException
from distributor.models import (
    Network,
    NetworkConfig,
    NetworkParams,
    RewardScheduleParams,
)

CHAIN_ID = {
    Network.TESTNET: 333,  # developer testnet
    Network.MAINNET: 1,
}

MSG_VERSION = 1
CLAIM_GAS_LIMIT = 30000

# tokens_per_epoch and max_epoch are replaced by the on-chain epoch config when it is available
DEFAULT_SCHEDULE = RewardScheduleParams(
    total_supply=Decimal(1_000_000),
    retroactive_airdrop_factor=Decimal("0.05"),
    fixed_airdrop_bonus=Decimal(8500),
    tokens_per_epoch=Decimal(20000),
    max_epoch=152,
)


def load_schedule_params(path: Optional[str] = None) -> RewardScheduleParams:
    """Loads schedule parameters from a json file, or the defaults if no path is passed"""
    if not path:
        return DEFAULT_SCHEDULE
    return RewardScheduleParams.model_validate_json(Path(path).read_text())


def load_network_config(path: str) -> NetworkConfig:
    """Loads an existing network config from file"""
    return NetworkConfig.model_validate_json(Path(path).read_text())


def default_network_config() -> NetworkConfig:
    """
    Network config built from the environment.
    Networks without a distributor address are left out, so claims against them
    fail with `UnsupportedNetwork`.
    """
    addresses = {
        Network.MAINNET: (env.DIST_CONTRACT.MAINNET, env.RPC.MAINNET, env.STATS_API.MAINNET),
        Network.TESTNET: (env.DIST_CONTRACT.TESTNET, env.RPC.TESTNET, env.STATS_API.TESTNET),
    }
    return NetworkConfig(
        networks={
            network: NetworkParams(
                chain_id=CHAIN_ID[network],
                distributor_address=address,
                rpc_url=rpc_url,
                stats_api=stats_api,
                msg_version=MSG_VERSION,
                gas_limit=CLAIM_GAS_LIMIT,
            )
            for network, (address, rpc_url, stats_api) in addresses.items()
            if address
        }
    )


def current_network(name: Optional[str] = None) -> Network:
    name = name or env.NETWORK
    try:
        return Network(name)
    except ValueError:
        raise BadConfigException(
            f"Unknown network {name}, expected one of {[n.value for n in Network]}"
        )


def write_network_config(config: NetworkConfig, path: str) -> None:
    with open(path, "w+") as j:
        j.write(json.dumps(config.model_dump(mode="json"), indent=4))
