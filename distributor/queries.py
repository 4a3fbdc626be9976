"""
Clients for the external collaborators of the engine: the distributor's stats API
and a Zilliqa JSON-RPC node. Nothing in the core imports this module.
"""

import logging
from typing import Any, Optional, cast

import eth_utils as eth
import requests
from pydantic import TypeAdapter

from distributor import env
from distributor.errors import EmptyQueryError
from distributor.models import (
    ByteAddress,
    DistributionData,
    EpochInfo,
    EpochInfoRaw,
    HexHash,
    Network,
    RPC_Response,
)

logger = logging.getLogger(__name__)

TIMEOUT = 30


def stats_api_url(network: Network) -> str:
    return env.STATS_API.MAINNET if network == Network.MAINNET else env.STATS_API.TESTNET


def rpc_url(network: Network) -> str:
    return env.RPC.MAINNET if network == Network.MAINNET else env.RPC.TESTNET


def api_get(url: str) -> Any:
    """GET a json document, raising if the API returns nothing"""
    logger.debug("GET %s", url)
    response = requests.get(url, timeout=TIMEOUT).json()
    if response is None:
        raise EmptyQueryError(f"No results for query to {url}")
    return response


def rpc_call(url: str, method: str, params: list[Any]) -> Any:
    """
    Single JSON-RPC call against a Zilliqa node
    :param `method`: eg 'GetMinimumGasPrice'
    """
    payload = {"id": "1", "jsonrpc": "2.0", "method": method, "params": params}
    logger.debug("RPC %s %s", url, method)
    response: RPC_Response = requests.post(url, json=payload, timeout=TIMEOUT).json()

    if not response:
        raise EmptyQueryError(f"No results for {method} to {url}")
    if "error" in response:
        raise EmptyQueryError(
            f"Error in {method} to {url}: {cast(dict, response)['error']}"
        )
    return response["result"]


def get_epoch_info(network: Network = Network.MAINNET) -> Optional[EpochInfo]:
    """
    Fetch the epoch config published by the distributor.
    Returns None when no schedule is active, which callers render as "no schedule"
    """
    response = api_get(f"{stats_api_url(network)}/epoch/info")
    if not response:
        logger.info("no epoch information published on %s", network.value)
        return None
    return EpochInfo.from_raw(EpochInfoRaw.model_validate(response))


def get_distribution_data(
    address: ByteAddress, network: Network = Network.MAINNET
) -> list[DistributionData]:
    """All leaves and proofs published for `address`, one per epoch"""
    address = eth.to_normalized_address(address)
    response = api_get(f"{stats_api_url(network)}/distribution/data/{address}")
    return TypeAdapter(list[DistributionData]).validate_python(response)


def get_epoch_roots(
    distributor_address: ByteAddress, network: Network = Network.MAINNET
) -> dict[int, HexHash]:
    """Merkle roots committed to the distributor contract, keyed by epoch"""
    result = rpc_call(
        rpc_url(network),
        "GetSmartContractSubState",
        [eth.remove_0x_prefix(eth.to_normalized_address(distributor_address)), "merkle_roots", []],
    )
    if not result or "merkle_roots" not in result:
        raise EmptyQueryError(f"No merkle roots found on {distributor_address}")
    return {int(epoch): root for epoch, root in result["merkle_roots"].items()}


def get_minimum_gas_price(network: Network = Network.MAINNET) -> str:
    """Current minimum gas price, in Qa"""
    return str(rpc_call(rpc_url(network), "GetMinimumGasPrice", [""]))
