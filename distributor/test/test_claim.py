from typing import Any

import pytest

from distributor import claim, merkle
from distributor.errors import (
    GasPriceTooLow,
    InvalidProof,
    NetworkNotInitialized,
    UnsupportedNetwork,
    WalletNotConnected,
)
from distributor.merkle import MerkleTree
from distributor.models import (
    ConnectedWallet,
    FixedPointAmount,
    Network,
    NetworkConfig,
    SubmissionResult,
    VerifiedClaim,
)
from distributor.test.conftest import DISTRIBUTOR

MIN_GAS_PRICE = "2000000000"


class RecordingCaller:
    """Stands in for the wallet's transaction submitter"""

    def __init__(self):
        self.calls: list[tuple[str, str, list[dict[str, Any]], dict[str, Any]]] = []

    def call_contract(self, address, entry_point, args, params) -> SubmissionResult:
        self.calls.append((address, entry_point, args, params))
        return SubmissionResult(tx_hash="ab" * 32)


@pytest.fixture
def verified(tree: MerkleTree, leaves) -> VerifiedClaim:
    leaf = leaves[0]
    return merkle.verify_claim(leaf, tree.proof(leaf), tree.root)


def test_build_mainnet(verified: VerifiedClaim, network_config, wallet):
    tx = claim.build(verified, network_config, MIN_GAS_PRICE, wallet, Network.MAINNET)

    assert tx.contract_address == DISTRIBUTOR
    assert tx.chain_id == 1
    assert tx.entry_point == "Claim"
    assert tx.amount == verified.leaf.amount
    assert tx.gas_price == MIN_GAS_PRICE
    assert tx.gas_limit == "30000"
    assert tx.version == 65537
    assert tx.tx_params() == {
        "amount": "0",
        "gasPrice": MIN_GAS_PRICE,
        "gasLimit": "30000",
        "version": 65537,
    }


def test_build_testnet_version(verified: VerifiedClaim, network_config, wallet):
    tx = claim.build(verified, network_config, MIN_GAS_PRICE, wallet, Network.TESTNET)
    assert tx.chain_id == 333
    assert tx.version == (333 << 16) + 1


def test_claim_args_shape(verified: VerifiedClaim, network_config, wallet):
    tx = claim.build(verified, network_config, MIN_GAS_PRICE, wallet, Network.MAINNET)
    leaf = verified.leaf

    assert tx.args == [
        {
            "vname": "claim",
            "type": "Claim",
            "value": {
                "constructor": "Claim",
                "argtypes": [],
                "arguments": [
                    "3",
                    {
                        "constructor": "DistributionLeaf",
                        "argtypes": [],
                        "arguments": [leaf.address, str(leaf.amount.value)],
                    },
                    [f"0x{p}" for p in verified.proof],
                ],
            },
        }
    ]


def test_unverified_leaf_is_refused(leaves, tree: MerkleTree, network_config, wallet):
    with pytest.raises(InvalidProof):
        claim.build(leaves[0], network_config, MIN_GAS_PRICE, wallet, Network.MAINNET)


def test_invalid_proof_never_reaches_the_builder(leaves, tree: MerkleTree):
    leaf = leaves[0]
    proof = tree.proof(leaf)
    caller = RecordingCaller()

    with pytest.raises(InvalidProof):
        verified = merkle.verify_claim(leaf, list(reversed(proof)), tree.root)
        claim.submit(claim.build(verified, None, MIN_GAS_PRICE, None, None), caller)

    assert caller.calls == []


def test_missing_context(verified: VerifiedClaim, network_config, wallet):
    with pytest.raises(WalletNotConnected):
        claim.build(verified, network_config, MIN_GAS_PRICE, None, Network.MAINNET)

    with pytest.raises(NetworkNotInitialized):
        claim.build(verified, network_config, MIN_GAS_PRICE, wallet, None)


def test_unsupported_network(verified: VerifiedClaim, network_config: NetworkConfig, wallet):
    mainnet_only = NetworkConfig(
        networks={Network.MAINNET: network_config.networks[Network.MAINNET]}
    )
    with pytest.raises(UnsupportedNetwork):
        claim.build(verified, mainnet_only, MIN_GAS_PRICE, wallet, Network.TESTNET)


def test_gas_price_policy(verified: VerifiedClaim, network_config, wallet):
    tx = claim.build(
        verified, network_config, MIN_GAS_PRICE, wallet, Network.MAINNET, gas_price=3000000000
    )
    assert tx.gas_price == "3000000000"

    with pytest.raises(GasPriceTooLow):
        claim.build(
            verified, network_config, MIN_GAS_PRICE, wallet, Network.MAINNET, gas_price=1
        )


@pytest.mark.parametrize(
    "chain_id, msg_version, expected",
    [(1, 1, 65537), (333, 1, 21823489), (0, 0, 0), (0xFFFF, 0xFFFF, 0xFFFFFFFF)],
)
def test_pack_version(chain_id, msg_version, expected):
    assert claim.pack_version(chain_id, msg_version) == expected


@pytest.mark.parametrize("chain_id, msg_version", [(0x10000, 1), (1, 0x10000), (-1, 1)])
def test_pack_version_out_of_range(chain_id, msg_version):
    with pytest.raises(ValueError):
        claim.pack_version(chain_id, msg_version)


def test_submit(verified: VerifiedClaim, network_config, wallet):
    caller = RecordingCaller()
    tx = claim.build(verified, network_config, MIN_GAS_PRICE, wallet, Network.MAINNET)

    result = claim.submit(tx, caller)

    assert result.tx_hash == "ab" * 32
    assert len(caller.calls) == 1
    address, entry_point, args, params = caller.calls[0]
    assert address == DISTRIBUTOR
    assert entry_point == "Claim"
    assert args == tx.args
    assert params == tx.tx_params()


def test_amount_comes_from_the_leaf(verified: VerifiedClaim, network_config, wallet):
    tx = claim.build(verified, network_config, MIN_GAS_PRICE, wallet, Network.MAINNET)
    assert tx.amount == verified.leaf.amount
    assert tx.args[0]["value"]["arguments"][1]["arguments"][1] == str(
        verified.leaf.amount.value
    )


def test_wallet_must_own_the_leaf(verified: VerifiedClaim, network_config):
    other = ConnectedWallet(address="0x9bc33f6155eFAcc290c3C50E9B5b24b668562732")
    with pytest.raises(WalletNotConnected, match="cannot claim for"):
        claim.build(verified, network_config, MIN_GAS_PRICE, other, Network.MAINNET)

    # checksummed and lowercase forms of the same address are one wallet
    same = ConnectedWallet(address=verified.leaf.address.upper().replace("0X", "0x"))
    tx = claim.build(verified, network_config, MIN_GAS_PRICE, same, Network.MAINNET)
    assert tx.args[0]["value"]["arguments"][1]["arguments"][0] == verified.leaf.address


def test_hand_made_verified_claim_is_refused(leaves, network_config, wallet):
    inflated = leaves[0].model_copy(update={"amount": FixedPointAmount(value=10**24)})
    forged = VerifiedClaim(leaf=inflated, proof=("00" * 32,), root="11" * 32)
    caller = RecordingCaller()

    with pytest.raises(InvalidProof, match="does not match root"):
        claim.submit(
            claim.build(forged, network_config, "1", wallet, Network.MAINNET), caller
        )

    assert caller.calls == []


def test_verified_claim_with_swapped_epoch_is_refused(
    verified: VerifiedClaim, network_config, wallet
):
    moved = verified.model_copy(
        update={"leaf": verified.leaf.model_copy(update={"epoch": 99})}
    )
    with pytest.raises(InvalidProof):
        claim.build(moved, network_config, MIN_GAS_PRICE, wallet, Network.MAINNET)
