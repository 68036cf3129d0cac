"""
Pytest fixtures for lsp-stats tests.

Provides sample pubkeys, channel/forward records and a factory that writes
gzipped JSON snapshots the way they are taken from lightning-cli.
"""

import gzip
import json
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lsp_stats.config import RoutingPeer
from lsp_stats.directory import ChannelDirectory
from lsp_stats.snapshots import Alias, Channel, Forward, LspNodeData


WINDOW_START = 1_711_929_600.0   # 2024-04-01T00:00:00Z
WINDOW_END = 1_714_521_600.0     # 2024-05-01T00:00:00Z
IN_WINDOW = WINDOW_START + 3600.5


@pytest.fixture
def peer_ids():
    """Pubkeys A (routing), B (not routing), C (routing)."""
    return {
        "A": "02" + "a" * 64,
        "B": "02" + "b" * 64,
        "C": "03" + "c" * 64,
    }


@pytest.fixture
def routing_peers(peer_ids):
    return [
        RoutingPeer(name="RouterA", pubkey=peer_ids["A"]),
        RoutingPeer(name="RouterC", pubkey=peer_ids["C"]),
    ]


@pytest.fixture
def sample_channels(peer_ids):
    """Confirmed channel to A, zeroconf alias-only channel to B, channel to C."""
    return [
        Channel(peer_id=peer_ids["A"], short_channel_id="100x1x0"),
        Channel(peer_id=peer_ids["B"], short_channel_id=None,
                alias=Alias(local="101x2x0", remote="900x9x9")),
        Channel(peer_id=peer_ids["C"], short_channel_id="102x3x0"),
    ]


@pytest.fixture
def make_node(sample_channels):
    """Build LspNodeData for a list of forwards over the sample channels."""
    def _make(forwards, channels=None):
        channels = sample_channels if channels is None else channels
        return LspNodeData(
            name="testlsp",
            pubkey="02" + "f" * 64,
            forwards=list(forwards),
            channels=list(channels),
            directory=ChannelDirectory.from_channels(channels),
        )
    return _make


@pytest.fixture
def make_forward():
    def _make(in_channel="100x1x0", out_channel="102x3x0", fee_msat=50,
              out_msat=2_000_000, received_time=IN_WINDOW):
        return Forward(
            in_channel=in_channel,
            out_channel=out_channel,
            fee_msat=fee_msat,
            out_msat=out_msat,
            received_time=received_time,
        )
    return _make


@pytest.fixture
def write_snapshot(tmp_path):
    """Write a JSON document gzipped to tmp_path/name and return its path."""
    def _write(name, document):
        path = tmp_path / name
        with gzip.open(path, "wt", encoding="utf-8") as f:
            json.dump(document, f)
        return str(path)
    return _write


@pytest.fixture
def raw_channels(peer_ids):
    """listpeerchannels / listclosedchannels style records."""
    return {
        "channels": [
            {"short_channel_id": "100x1x0", "peer_id": peer_ids["A"],
             "alias": {"local": "5000x1x1", "remote": "6000x1x1"}},
            {"peer_id": peer_ids["B"],
             "alias": {"local": "101x2x0", "remote": "900x9x9"}},
        ],
        "closedchannels": [
            {"short_channel_id": "102x3x0", "peer_id": peer_ids["C"]},
        ],
    }


@pytest.fixture
def snapshot_files(write_snapshot, raw_channels):
    """Write a consistent set of three snapshots; returns a path dict."""
    def _write(forwards):
        return {
            "forwards_file": write_snapshot("forwards.json.gz", {"forwards": forwards}),
            "channels_file": write_snapshot(
                "channels.json.gz", {"channels": raw_channels["channels"]}),
            "closed_channels_file": write_snapshot(
                "closed.json.gz", {"closedchannels": raw_channels["closedchannels"]}),
        }
    return _write
