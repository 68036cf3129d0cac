"""
LSP statistics pass

Folds one month of forwards into two accumulators:

1. LspStats - every forward in the window, plus an "excluding opens"
   variant that leaves out forwards which look like a channel open paid
   for through a routed payment rather than real routing
2. RoutingStats - only forwards where both the incoming and outgoing peer
   are configured routing peers

Probable channel open:
    fee_ppm = fee_msat * 1_000_000 // out_msat
    fee_ppm >= open_fee_ppm (3999) AND out_msat >= open_min_msat (500 sat)

A forward over a channel that is in neither channel snapshot aborts the
whole pass: the snapshots are out of sync and every total would be wrong.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .config import DEFAULT_OPEN_FEE_PPM, DEFAULT_OPEN_MIN_MSAT, RoutingPeer
from .snapshots import Forward, LspNodeData

logger = logging.getLogger(__name__)

PPM = 1_000_000


@dataclass
class RoutingStats:
    """Totals for forwards between routing peers."""
    count: int = 0
    amount_msat: int = 0
    fee_msat: int = 0

    def add(self, forward: Forward) -> None:
        self.count += 1
        self.amount_msat += forward.out_msat
        self.fee_msat += forward.fee_msat


@dataclass
class LspStats:
    """
    Totals for all forwards in the window.

    The *_excluding_opens fields leave out forwards classified as probable
    channel opens.
    """
    count: int = 0
    amount_msat: int = 0
    fee_msat: int = 0
    count_excluding_opens: int = 0
    amount_msat_excluding_opens: int = 0
    fee_msat_excluding_opens: int = 0

    def add(self, forward: Forward, probable_open: bool) -> None:
        self.count += 1
        self.amount_msat += forward.out_msat
        self.fee_msat += forward.fee_msat
        if not probable_open:
            self.count_excluding_opens += 1
            self.amount_msat_excluding_opens += forward.out_msat
            self.fee_msat_excluding_opens += forward.fee_msat


def in_window(forward: Forward, start: float, end: float) -> bool:
    """True if start <= received_time < end."""
    return start <= forward.received_time < end


def fee_rate_ppm(forward: Forward) -> Optional[int]:
    """
    Fee rate of a forward in parts per million, rounded down.

    Returns:
        None for zero-amount forwards, which have no meaningful rate
    """
    if forward.out_msat == 0:
        return None
    return (forward.fee_msat * PPM) // forward.out_msat


def is_probable_open(forward: Forward,
                     open_fee_ppm: int = DEFAULT_OPEN_FEE_PPM,
                     open_min_msat: int = DEFAULT_OPEN_MIN_MSAT) -> bool:
    """
    Classify a forward as a probable channel open.

    LSPs open channels on the fly and charge for it by skimming the
    payment being forwarded, which shows up as an unusually high fee on a
    non-trivial amount.
    """
    rate = fee_rate_ppm(forward)
    if rate is None:
        return False
    return rate >= open_fee_ppm and forward.out_msat >= open_min_msat


def compute_lsp_stats(start: float, end: float, node: LspNodeData,
                      routing_peers: Iterable[RoutingPeer],
                      open_fee_ppm: int = DEFAULT_OPEN_FEE_PPM,
                      open_min_msat: int = DEFAULT_OPEN_MIN_MSAT
                      ) -> Tuple[LspStats, RoutingStats]:
    """
    Run the statistics pass over the node's forwards.

    Args:
        start: Window start, Unix epoch seconds (inclusive)
        end: Window end, Unix epoch seconds (exclusive)
        node: Loaded forwards and channel directory
        routing_peers: Peers whose mutual traffic is totalled separately
        open_fee_ppm: Fee rate threshold of the channel-open heuristic
        open_min_msat: Minimum amount of the channel-open heuristic

    Returns:
        (LspStats, RoutingStats) for the window

    Raises:
        UnknownChannelError: if a forward in the window uses a channel the
            directory cannot resolve
    """
    totals = LspStats()
    routing = RoutingStats()
    routing_pubkeys = {peer.pubkey for peer in routing_peers}
    skipped = 0

    for forward in node.forwards:
        if not in_window(forward, start, end):
            skipped += 1
            continue

        totals.add(forward, is_probable_open(forward, open_fee_ppm, open_min_msat))

        in_peer = node.directory.peer_for(forward.in_channel)
        out_peer = node.directory.peer_for(forward.out_channel)
        if in_peer in routing_pubkeys and out_peer in routing_pubkeys:
            routing.add(forward)

    logger.debug(
        f"{node.name}: {totals.count} forwards in window, {skipped} outside, "
        f"{totals.count - totals.count_excluding_opens} probable opens, "
        f"{routing.count} between routing peers"
    )
    return totals, routing
