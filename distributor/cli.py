"""
Command line entry point. Everything here talks to the outside world, the
computations live in the modules it calls.

    zwap-distributor overview --pools=pools.json
    zwap-distributor countdown
    zwap-distributor claims 0x...
    zwap-distributor claim 0x... 12
    zwap-distributor history 0x...
"""

import json
import logging
from decimal import getcontext
from pathlib import Path
from typing import Optional

import fire

from distributor import clock, merkle, queries
from distributor import claim as claims_builder
from distributor.config import (
    current_network,
    default_network_config,
    load_network_config,
    load_schedule_params,
)
from distributor.errors import ClaimError, ScheduleUnavailable
from distributor.history import ClaimHistory
from distributor.models import ClaimState, ConnectedWallet, LiquiditySnapshot
from distributor.overview import build_overview

# set the context for decimal precision to avoid scientific notation
getcontext().prec = 42


def overview(
    pools: Optional[str] = None,
    network: Optional[str] = None,
    schedule: Optional[str] = None,
) -> None:
    """Print TVL, total rewards and the epoch countdown"""
    net = current_network(network)
    epoch_info = queries.get_epoch_info(net)
    snapshot = (
        LiquiditySnapshot.model_validate_json(Path(pools).read_text())
        if pools
        else LiquiditySnapshot(tokens=[])
    )

    result = build_overview(
        epoch_info,
        load_schedule_params(schedule),
        snapshot.tokens,
        snapshot.prices,
        snapshot.liquidity_change_24h,
        values=snapshot.values,
    )
    for k, v in result.display().items():
        print(f"{k:>20}: {v}")


def countdown(network: Optional[str] = None) -> None:
    net = current_network(network)
    try:
        remaining = clock.tick(queries.get_epoch_info(net))
    except ScheduleUnavailable:
        print("⏳ No reward schedule published yet")
        return
    print(f"⏳ {remaining} until the next epoch")


def claims(address: str, network: Optional[str] = None, config: Optional[str] = None) -> None:
    """List every allocation published for `address` and whether its proof checks out"""
    net = current_network(network)
    network_config = load_network_config(config) if config else default_network_config()
    params = network_config.get(net)

    verifier = None
    if params:
        verifier = merkle.MerkleClaimVerifier(
            queries.get_epoch_roots(params.distributor_address, net)
        )

    for data in queries.get_distribution_data(address, net):
        leaf = data.to_leaf()
        if verifier is None:
            check = "❔"
        else:
            check = "✅" if verifier.verify(leaf, data.proof) else "❌"
        print(f"{check} epoch {leaf.epoch}: {leaf.amount.to_format(4)} ZWAP")


def claim(
    address: str,
    epoch: int,
    network: Optional[str] = None,
    config: Optional[str] = None,
    db: Optional[str] = None,
) -> None:
    """
    Verify and build the `Claim` transaction for one epoch and print it for an external signer.
    Pass `db` to refuse building a claim that is already in flight.
    """
    net = current_network(network)
    network_config = load_network_config(config) if config else default_network_config()
    params = network_config.get(net)
    if params is None:
        print(f"❌ No distributor configured for {net.value}")
        return

    published = [
        d for d in queries.get_distribution_data(address, net) if d.epoch_number == epoch
    ]
    if not published:
        print(f"🤷 Nothing to claim for {address} at epoch {epoch}")
        return

    data = published[0]
    leaf = data.to_leaf()
    if db:
        existing = ClaimHistory(db).find(leaf.epoch, leaf.address)
        if existing and existing.state != ClaimState.FAILED:
            print(f"⏳ Claim already {existing.state.value}: {existing.tx_hash}")
            return

    verifier = merkle.MerkleClaimVerifier(
        queries.get_epoch_roots(params.distributor_address, net)
    )
    try:
        verified = verifier.verify_claim(leaf, data.proof)
        tx = claims_builder.build(
            verified,
            network_config,
            queries.get_minimum_gas_price(net),
            ConnectedWallet(address=address),
            net,
        )
    except ClaimError as e:
        print(f"❌ {type(e).__name__}: {e}")
        return

    print(json.dumps(tx.model_dump(mode="json"), indent=4))


def history(address: str, db: str = "claims-db.json") -> None:
    for record in ClaimHistory(db).for_address(address):
        print(f"epoch {record.epoch}: {record.amount} {record.state.value} {record.tx_hash or ''}")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    fire.Fire(
        {
            "overview": overview,
            "countdown": countdown,
            "claims": claims,
            "claim": claim,
            "history": history,
        }
    )


if __name__ == "__main__":
    main()
