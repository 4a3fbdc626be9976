"""
Merkle membership proofs for distribution leaves.

Commitment rules, shared by the tree builder and the verifier:
    - leaf hash: sha256(epoch as a big endian Uint32 || byte20 address || amount as a big endian Uint128)
    - parent hash: sha256 of the two children sorted bytewise, so proofs carry no positions
    - an unpaired node at the end of a level is promoted to the next level unchanged
    - every epoch has its own tree, and the epoch is hashed into the leaf so a leaf only
      verifies against the root of the epoch it was published for
"""

from __future__ import annotations

import hashlib
from typing import Iterable, Optional, Sequence

import eth_utils as eth

from distributor.errors import InvalidProof
from distributor.models import DistributionLeaf, HexHash, VerifiedClaim

HASH_LENGTH = 32
UINT32_BYTES = 4
UINT128_BYTES = 16


def _decode(h: HexHash) -> bytes:
    try:
        raw = eth.decode_hex(h)
    except (ValueError, TypeError) as e:
        raise InvalidProof(f"Malformed hash {h!r}") from e
    if len(raw) != HASH_LENGTH:
        raise InvalidProof(f"Expected a {HASH_LENGTH} byte hash, got {len(raw)} bytes")
    return raw


def _encode(h: bytes) -> HexHash:
    return eth.remove_0x_prefix(eth.encode_hex(h))


def hash_leaf(leaf: DistributionLeaf) -> bytes:
    if leaf.epoch < 0 or leaf.epoch >= 2 ** (8 * UINT32_BYTES):
        raise InvalidProof(f"Leaf epoch {leaf.epoch} does not fit a Uint32")
    amount = leaf.amount.value
    if amount < 0 or amount >= 2 ** (8 * UINT128_BYTES):
        raise InvalidProof(f"Leaf amount {amount} does not fit a Uint128")
    return hashlib.sha256(
        leaf.epoch.to_bytes(UINT32_BYTES, "big")
        + eth.decode_hex(leaf.address)
        + amount.to_bytes(UINT128_BYTES, "big")
    ).digest()


def hash_pair(a: bytes, b: bytes) -> bytes:
    left, right = (a, b) if a <= b else (b, a)
    return hashlib.sha256(left + right).digest()


def fold_proof(leaf: DistributionLeaf, proof: Iterable[HexHash]) -> bytes:
    current = hash_leaf(leaf)
    for sibling in proof:
        current = hash_pair(current, _decode(sibling))
    return current


def verify(leaf: DistributionLeaf, proof: Sequence[HexHash], root: HexHash) -> bool:
    """True if `proof` folds `leaf` up to `root`. Pure, never raises on bad input."""
    try:
        return fold_proof(leaf, proof) == _decode(root)
    except InvalidProof:
        return False


def verify_claim(
    leaf: DistributionLeaf, proof: Sequence[HexHash], root: HexHash
) -> VerifiedClaim:
    """
    Check membership and wrap the leaf so that it can be turned into a claim transaction.
    A `VerifiedClaim` is the only input the claim builder accepts.
    """
    if not verify(leaf, proof, root):
        raise InvalidProof(
            f"Proof for {leaf.address} at epoch {leaf.epoch} does not match root {root}"
        )
    return VerifiedClaim(
        leaf=leaf,
        proof=tuple(eth.remove_0x_prefix(p) for p in proof),
        root=eth.remove_0x_prefix(root),
    )


class MerkleClaimVerifier:
    """Verifies leaves against the root published for their epoch"""

    def __init__(self, roots: dict[int, HexHash]):
        self.roots = dict(roots)

    def root_for(self, epoch: int) -> HexHash:
        root = self.roots.get(epoch)
        if root is None:
            raise InvalidProof(f"No root published for epoch {epoch}")
        return root

    def verify(self, leaf: DistributionLeaf, proof: Sequence[HexHash]) -> bool:
        root = self.roots.get(leaf.epoch)
        return root is not None and verify(leaf, proof, root)

    def verify_claim(
        self, leaf: DistributionLeaf, proof: Sequence[HexHash]
    ) -> VerifiedClaim:
        return verify_claim(leaf, proof, self.root_for(leaf.epoch))


class MerkleTree:
    """
    Builds the tree for one epoch's distribution, as the distributor does when an epoch closes.
    """

    def __init__(self, leaves: list[DistributionLeaf]):
        if not leaves:
            raise ValueError("Cannot build a tree without leaves")

        epochs = {leaf.epoch for leaf in leaves}
        if len(epochs) > 1:
            raise ValueError(f"Leaves span multiple epochs: {sorted(epochs)}")

        addresses = [leaf.address for leaf in leaves]
        if len(set(addresses)) != len(addresses):
            raise ValueError("Passed duplicate addresses for a single epoch")

        self.epoch = leaves[0].epoch
        self.leaves = list(leaves)
        self.levels: list[list[bytes]] = [[hash_leaf(leaf) for leaf in leaves]]
        while len(self.levels[-1]) > 1:
            self.levels.append(self._next_level(self.levels[-1]))

    @staticmethod
    def _next_level(level: list[bytes]) -> list[bytes]:
        parents = []
        for i in range(0, len(level), 2):
            if i + 1 < len(level):
                parents.append(hash_pair(level[i], level[i + 1]))
            else:
                parents.append(level[i])
        return parents

    @property
    def root(self) -> HexHash:
        return _encode(self.levels[-1][0])

    @property
    def depth(self) -> int:
        return len(self.levels) - 1

    def _index(self, leaf: DistributionLeaf) -> int:
        for idx, candidate in enumerate(self.leaves):
            if candidate == leaf:
                return idx
        raise ValueError(f"Leaf for {leaf.address} is not part of this tree")

    def proof(self, leaf: DistributionLeaf) -> list[HexHash]:
        idx = self._index(leaf)
        path: list[HexHash] = []
        for level in self.levels[:-1]:
            sibling = idx ^ 1
            if sibling < len(level):
                path.append(_encode(level[sibling]))
            idx //= 2
        return path

    def find(self, address: str) -> Optional[DistributionLeaf]:
        address = eth.to_normalized_address(address)
        return next((leaf for leaf in self.leaves if leaf.address == address), None)
