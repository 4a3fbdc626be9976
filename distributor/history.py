import logging
from typing import Optional

import eth_utils as eth
from tinydb import TinyDB, where
from tinydb.table import Table

from distributor import claim
from distributor.errors import ClaimInFlightError
from distributor.models import (
    ByteAddress,
    ClaimRecord,
    ClaimState,
    ClaimTransactionParams,
    DistributionLeaf,
    HexHash,
    SubmissionResult,
    VerifiedClaim,
)

logger = logging.getLogger(__name__)


class ClaimHistory(TinyDB):
    """
    Local record of claims handed to the submitter.
    The distributor contract decides whether a claim is valid, this only stops the same
    (address, epoch) being submitted twice while a transaction is in flight.
    """

    def __init__(self, path: str, drop=False, **kwargs):
        super().__init__(path, indent=4, create_dirs=True, **kwargs)

        if drop:
            self.drop_tables()

    @property
    def claims(self) -> Table:
        return self.table("claims")

    @staticmethod
    def _match(epoch: int, address: ByteAddress):
        return (where("epoch") == epoch) & (
            where("address") == eth.to_normalized_address(address)
        )

    def _write(self, record: ClaimRecord) -> ClaimRecord:
        self.claims.upsert(
            record.model_dump(mode="json"), self._match(record.epoch, record.address)
        )
        return record

    def find(self, epoch: int, address: ByteAddress) -> Optional[ClaimRecord]:
        found = self.claims.get(self._match(epoch, address))
        return ClaimRecord.model_validate(found) if found else None

    def begin(self, leaf: DistributionLeaf) -> ClaimRecord:
        """Mark a claim as pending, refusing if one is already pending or submitted"""
        existing = self.find(leaf.epoch, leaf.address)
        if existing and existing.state != ClaimState.FAILED:
            raise ClaimInFlightError(
                f"Claim for {leaf.address} at epoch {leaf.epoch} is already {existing.state.value}"
            )
        return self._write(
            ClaimRecord(
                epoch=leaf.epoch,
                address=leaf.address,
                amount=str(leaf.amount.value),
                state=ClaimState.PENDING,
            )
        )

    def mark_submitted(self, leaf: DistributionLeaf, tx_hash: HexHash) -> ClaimRecord:
        record = self.begin_or_get(leaf)
        record.state = ClaimState.SUBMITTED
        record.tx_hash = tx_hash
        return self._write(record)

    def mark_failed(self, leaf: DistributionLeaf) -> ClaimRecord:
        record = self.begin_or_get(leaf)
        record.state = ClaimState.FAILED
        return self._write(record)

    def begin_or_get(self, leaf: DistributionLeaf) -> ClaimRecord:
        return self.find(leaf.epoch, leaf.address) or self.begin(leaf)

    def for_address(self, address: ByteAddress) -> list[ClaimRecord]:
        records = self.claims.search(
            where("address") == eth.to_normalized_address(address)
        )
        return sorted(
            (ClaimRecord.model_validate(r) for r in records), key=lambda r: r.epoch
        )


def submit_claim(
    verified: VerifiedClaim,
    tx: ClaimTransactionParams,
    caller: claim.ContractCaller,
    history: ClaimHistory,
) -> SubmissionResult:
    """
    Submit a built claim, keeping at most one claim in flight per address and epoch.
    A failed submission is recorded and re-raised, retrying is up to the caller.
    """
    leaf = verified.leaf
    history.begin(leaf)
    try:
        result = claim.submit(tx, caller)
    except Exception:
        logger.exception("claim for %s at epoch %s failed", leaf.address, leaf.epoch)
        history.mark_failed(leaf)
        raise
    history.mark_submitted(leaf, result.tx_hash)
    return result
