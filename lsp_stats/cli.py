"""
Command line entry point for lsp-stats.

Running without arguments reports on the defaults in Config. Every option
overrides one config field for this run only.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import Config, parse_routing_peer
from .errors import ConfigError, LspStatsError
from .report import render_banner, render_node_stats
from .snapshots import load_node_data
from .stats import compute_lsp_stats

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lsp-stats",
        description="Monthly routing volume and fee statistics for an LSP node, "
                    "computed from gzipped listforwards/listpeerchannels/"
                    "listclosedchannels snapshots.",
    )
    parser.add_argument("--month", help="Reporting month, YYYY-MM (local time)")
    parser.add_argument("--forwards", dest="forwards_file",
                        help="Gzipped listforwards status=settled snapshot")
    parser.add_argument("--channels", dest="channels_file",
                        help="Gzipped listpeerchannels snapshot")
    parser.add_argument("--closed-channels", dest="closed_channels_file",
                        help="Gzipped listclosedchannels snapshot")
    parser.add_argument("--node-name", help="Display name of the LSP node")
    parser.add_argument("--node-pubkey", help="Node ID of the LSP node")
    parser.add_argument("--routing-peer", action="append", metavar="NAME=PUBKEY",
                        help="Routing peer, may be repeated; replaces the defaults")
    parser.add_argument("--open-fee-ppm", help="Fee rate at which a forward counts "
                                               "as a probable channel open")
    parser.add_argument("--open-min-msat", help="Minimum amount for a forward to "
                                                "count as a probable channel open")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log progress to stderr")
    return parser


def load_config(args: argparse.Namespace) -> Config:
    """Apply command line overrides on top of the defaults and validate."""
    config = Config()
    config.apply_overrides({
        'month': args.month,
        'forwards_file': args.forwards_file,
        'channels_file': args.channels_file,
        'closed_channels_file': args.closed_channels_file,
        'node_name': args.node_name,
        'node_pubkey': args.node_pubkey,
        'open_fee_ppm': args.open_fee_ppm,
        'open_min_msat': args.open_min_msat,
    })
    if args.routing_peer:
        config.routing_peers = [parse_routing_peer(v) for v in args.routing_peer]
    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        cfg = load_config(args).snapshot()
        start, end = cfg.reporting_window()
        logger.debug(f"reporting window {start.isoformat()} - {end.isoformat()}")
    except ConfigError as e:
        print(f"failed to load config: {e}")
        return 1

    sys.stdout.write(render_banner(cfg.month, start, end))

    try:
        node = load_node_data(cfg)
    except LspStatsError as e:
        print(f"failed to initialize nodes: {e}")
        return 1

    try:
        totals, routing = compute_lsp_stats(
            start.timestamp(), end.timestamp(), node, cfg.routing_peers,
            open_fee_ppm=cfg.open_fee_ppm, open_min_msat=cfg.open_min_msat,
        )
    except LspStatsError as e:
        print(f"failed to get lsp stats for {node.name}: {e}")
        return 1

    sys.stdout.write(render_node_stats(
        node.name, totals, routing, [peer.name for peer in cfg.routing_peers]
    ))
    return 0


if __name__ == "__main__":
    sys.exit(main())
