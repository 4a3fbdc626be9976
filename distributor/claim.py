from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence, Union

import eth_utils as eth

from distributor import merkle
from distributor.errors import (
    GasPriceTooLow,
    InvalidProof,
    NetworkNotInitialized,
    UnsupportedNetwork,
    WalletNotConnected,
)
from distributor.models import (
    BigNumber,
    ByteAddress,
    ClaimTransactionParams,
    ConnectedWallet,
    FixedPointAmount,
    HexHash,
    Network,
    NetworkConfig,
    SubmissionResult,
    VerifiedClaim,
)

logger = logging.getLogger(__name__)

MAX_UINT16 = 0xFFFF


class ContractCaller(Protocol):
    """
    Whatever signs and broadcasts transactions for the connected wallet.
    Nonces, broadcasting and confirmations are its concern, not ours.
    """

    def call_contract(
        self,
        address: ByteAddress,
        entry_point: str,
        args: list[dict[str, Any]],
        params: dict[str, Any],
    ) -> SubmissionResult:
        ...


def pack_version(chain_id: int, msg_version: int) -> int:
    """Zilliqa transaction version: chain id in the high 16 bits, message version in the low 16"""
    if not 0 <= chain_id <= MAX_UINT16:
        raise ValueError(f"Chain id {chain_id} does not fit 16 bits")
    if not 0 <= msg_version <= MAX_UINT16:
        raise ValueError(f"Message version {msg_version} does not fit 16 bits")
    return (chain_id << 16) + msg_version


def claim_args(
    epoch: int, address: ByteAddress, amount: FixedPointAmount, proof: Sequence[HexHash]
) -> list[dict[str, Any]]:
    """Arguments for the distributor's `Claim` transition"""
    return [
        {
            "vname": "claim",
            "type": "Claim",
            "value": {
                "constructor": "Claim",
                "argtypes": [],
                "arguments": [
                    str(epoch),
                    {
                        "constructor": "DistributionLeaf",
                        "argtypes": [],
                        "arguments": [address, str(amount.value)],
                    },
                    [eth.add_0x_prefix(p) for p in proof],
                ],
            },
        }
    ]


def build(
    claim: VerifiedClaim,
    network_config: NetworkConfig,
    min_gas_price: Union[BigNumber, int],
    wallet: Optional[ConnectedWallet],
    network: Optional[Network],
    gas_price: Optional[Union[BigNumber, int]] = None,
) -> ClaimTransactionParams:
    """
    Turn a verified leaf into a ready to sign `Claim` invocation.

    :param `claim`: output of `merkle.verify_claim`, unverified leaves are refused
    and the proof is folded again against `claim.root`
    :param `wallet`: must own the leaf, claims are only built for the connected address
    :param `min_gas_price`: current minimum from the network's gas price oracle
    :param `gas_price`: optional override, must not be below `min_gas_price`
    """
    if not isinstance(claim, VerifiedClaim):
        raise InvalidProof("Claims must be verified before a transaction is built")
    if not merkle.verify(claim.leaf, claim.proof, claim.root):
        raise InvalidProof(
            f"Proof for {claim.leaf.address} at epoch {claim.leaf.epoch} does not match root {claim.root}"
        )
    if wallet is None:
        raise WalletNotConnected("Wallet not connected")
    if wallet.address != claim.leaf.address:
        raise WalletNotConnected(
            f"Connected wallet {wallet.address} cannot claim for {claim.leaf.address}"
        )
    if network is None:
        raise NetworkNotInitialized("Network not initialized")

    params = network_config.get(network)
    if params is None:
        raise UnsupportedNetwork(f"No distributor configured for {network.value}")

    minimum = int(min_gas_price)
    price = minimum if gas_price is None else int(gas_price)
    if price < minimum:
        raise GasPriceTooLow(f"Gas price {price} is below the network minimum {minimum}")

    leaf = claim.leaf
    return ClaimTransactionParams(
        contract_address=params.distributor_address,
        chain_id=params.chain_id,
        amount=leaf.amount,
        gas_price=str(price),
        gas_limit=str(params.gas_limit),
        version=pack_version(params.chain_id, params.msg_version),
        args=claim_args(leaf.epoch, leaf.address, leaf.amount, claim.proof),
    )


def submit(tx: ClaimTransactionParams, caller: ContractCaller) -> SubmissionResult:
    """Hand a built claim to the submitter. Failures propagate, nothing is retried here."""
    logger.info(
        "submitting claim to %s on chain %s for %s",
        tx.contract_address,
        tx.chain_id,
        tx.amount,
    )
    result = caller.call_contract(
        tx.contract_address, tx.entry_point, tx.args, tx.tx_params()
    )
    logger.info("claim submitted with tx %s", result.tx_hash)
    return result
