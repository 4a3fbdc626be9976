from __future__ import annotations

from enum import Enum
from typing import Any, Optional

import eth_utils as eth
from pydantic import BaseModel, ConfigDict, field_validator

from distributor.models.Amount import FixedPointAmount
from distributor.models.types import BigNumber, ByteAddress, HexHash


class DistributionLeaf(BaseModel):
    """
    A single claimable allocation committed into an epoch's merkle tree.
    The schedule publishes at most one leaf per address per epoch.
    :param `amount`: base units of the reward token
    """

    model_config = ConfigDict(frozen=True)

    epoch: int
    address: ByteAddress
    amount: FixedPointAmount

    @field_validator("address")
    @classmethod
    def normalize_address(cls, addr: ByteAddress) -> ByteAddress:
        if not eth.is_hex_address(addr):
            raise ValueError(f"Not a byte20 address: {addr}")
        return eth.to_normalized_address(addr)

    @field_validator("epoch")
    @classmethod
    def check_epoch(cls, epoch: int) -> int:
        if epoch < 0:
            raise ValueError(f"Epoch must be positive, passed {epoch}")
        return epoch


class DistributionData(BaseModel):
    """
    A leaf and its proof as served by the stats API for a single address
    :param `proof`: sibling hashes from the leaf to the root, hex without a prefix
    """

    epoch_number: int
    address_bech32: Optional[str] = None
    address_hex: ByteAddress
    amount: BigNumber
    proof: list[HexHash]

    def to_leaf(self) -> DistributionLeaf:
        return DistributionLeaf(
            epoch=self.epoch_number,
            address=self.address_hex,
            amount=FixedPointAmount.from_base(self.amount),
        )


class VerifiedClaim(BaseModel):
    """
    A leaf together with the proof that folded to `root`.
    Created by `merkle.verify_claim`. The claim builder folds the proof again,
    so one assembled by hand gains nothing.
    """

    model_config = ConfigDict(frozen=True)

    leaf: DistributionLeaf
    proof: tuple[HexHash, ...]
    root: HexHash


class ConnectedWallet(BaseModel):
    """The signer the caller has connected. Signing itself happens outside the engine."""

    address: ByteAddress

    @field_validator("address")
    @classmethod
    def normalize_address(cls, addr: ByteAddress) -> ByteAddress:
        return eth.to_normalized_address(addr)


class ClaimTransactionParams(BaseModel):
    """
    Fully specified `Claim` invocation, ready to be signed.
    :param `amount`: claimed token amount, always taken from the leaf
    :param `transfer_amount`: native ZIL attached to the call, always zero for claims
    :param `version`: chain id and message version packed into one integer
    :param `args`: contract call arguments in the distributor's tagged constructor encoding
    """

    contract_address: ByteAddress
    chain_id: int
    entry_point: str = "Claim"
    amount: FixedPointAmount
    transfer_amount: BigNumber = "0"
    gas_price: BigNumber
    gas_limit: BigNumber
    version: int
    args: list[dict[str, Any]]

    def tx_params(self) -> dict[str, Any]:
        return {
            "amount": self.transfer_amount,
            "gasPrice": self.gas_price,
            "gasLimit": self.gas_limit,
            "version": self.version,
        }


class SubmissionResult(BaseModel):
    tx_hash: HexHash
    accepted: bool = True


class ClaimState(str, Enum):
    """
    :state PENDING: a claim has been built and handed to the submitter
    :state SUBMITTED: the submitter returned a transaction hash
    :state FAILED: the submitter raised, the claim can be retried
    """

    PENDING = "pending"
    SUBMITTED = "submitted"
    FAILED = "failed"


class ClaimRecord(BaseModel):
    epoch: int
    address: ByteAddress
    amount: BigNumber
    state: ClaimState
    tx_hash: Optional[HexHash] = None
