"""
Configuration module for lsp-stats

Contains the Config dataclass that holds every tunable parameter of a
report run: the reporting month, the snapshot file paths, the LSP node
identity, the routing peers and the channel-open heuristic thresholds.

The defaults reproduce the original breezc report for 2024-04, so running
without any overrides behaves exactly like the compiled-in version did.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Tuple, Any

from .errors import ConfigError


MONTH_FORMAT = "%Y-%m"

_PUBKEY_RE = re.compile(r"^(02|03)[0-9a-f]{64}$")

# Probable channel-open heuristic defaults
DEFAULT_OPEN_FEE_PPM = 3999       # fee rate at or above this is suspicious
DEFAULT_OPEN_MIN_MSAT = 500_000   # ...when at least 500 sat were forwarded

# Type mapping for config fields (for override parsing)
CONFIG_FIELD_TYPES: Dict[str, type] = {
    'month': str,
    'forwards_file': str,
    'channels_file': str,
    'closed_channels_file': str,
    'node_name': str,
    'node_pubkey': str,
    'open_fee_ppm': int,
    'open_min_msat': int,
}

# Range constraints for numeric fields
CONFIG_FIELD_RANGES: Dict[str, tuple] = {
    'open_fee_ppm': (0, 1_000_000_000),
    'open_min_msat': (0, 21_000_000 * 100_000_000 * 1000),
}


@dataclass(frozen=True)
class RoutingPeer:
    """
    A node whose peer-to-peer traffic through the LSP is tracked separately.

    Attributes:
        name: Display name used in the report header
        pubkey: Node ID (33-byte compressed pubkey, hex)
    """
    name: str
    pubkey: str


def default_routing_peers() -> List[RoutingPeer]:
    return [
        RoutingPeer(
            name="BreezR",
            pubkey="02442d4249f9a93464aaf8cd8d522faa869356707b5f1537a8d6def2af50058c5b",
        ),
        RoutingPeer(
            name="Breez",
            pubkey="031015a7839468a3c266d662d5bb21ea4cea24226936e2864a7ca4f2c3939836e0",
        ),
    ]


def parse_routing_peer(value: str) -> RoutingPeer:
    """
    Parse a NAME=PUBKEY command line value into a RoutingPeer.

    Raises:
        ConfigError: if the value has no '=' or either side is empty
    """
    name, sep, pubkey = value.partition("=")
    name = name.strip()
    pubkey = pubkey.strip().lower()
    if not sep or not name or not pubkey:
        raise ConfigError(f"invalid routing peer '{value}', expected NAME=PUBKEY")
    return RoutingPeer(name=name, pubkey=pubkey)


def month_window(month: str) -> Tuple[datetime, datetime]:
    """
    Compute the half-open reporting window for a YYYY-MM month.

    The window runs from the first of the month at midnight local time up
    to (excluding) the first of the following month at midnight local time.
    Both bounds are returned as timezone-aware datetimes.

    Raises:
        ConfigError: if the month string cannot be parsed
    """
    try:
        first = datetime.strptime(month, MONTH_FORMAT)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"failed to parse month '{month}': {e}") from e

    if first.month == 12:
        following = first.replace(year=first.year + 1, month=1)
    else:
        following = first.replace(month=first.month + 1)

    # naive datetimes are interpreted as local time by astimezone()
    return first.astimezone(), following.astimezone()


@dataclass
class Config:
    """
    Configuration container for a report run.

    All values can be overridden from the command line before the run
    starts; the run itself only ever sees an immutable ConfigSnapshot.
    """

    # Reporting month (YYYY-MM, local time)
    month: str = "2024-04"

    # Snapshot files (gzip-compressed JSON)
    forwards_file: str = "breezc-listforwards-settled-2024-05-06.json.gz"
    channels_file: str = "breezc-listpeerchannels-2024-05-06.json.gz"
    closed_channels_file: str = "breezc-listclosedchannels-2024-05-06.json.gz"

    # LSP node identity
    node_name: str = "breezc"
    node_pubkey: str = "02c811e575be2df47d8b48dab3d3f1c9b0f6e16d0d40b5ed78253308fc2bd7170d"

    # Nodes whose mutual traffic is reported separately
    routing_peers: List[RoutingPeer] = field(default_factory=default_routing_peers)

    # Probable channel-open heuristic
    open_fee_ppm: int = DEFAULT_OPEN_FEE_PPM
    open_min_msat: int = DEFAULT_OPEN_MIN_MSAT

    def apply_override(self, key: str, value: str) -> None:
        """
        Apply a single override with type conversion and range check.

        Raises:
            ConfigError: for unknown keys, bad types or out-of-range values
        """
        if key not in CONFIG_FIELD_TYPES:
            raise ConfigError(f"Unknown config key: {key}")

        field_type = CONFIG_FIELD_TYPES[key]
        try:
            if field_type == int:
                typed_value = int(value)
            else:
                typed_value = str(value)
            if key == 'node_pubkey':
                typed_value = typed_value.strip().lower()
        except (ValueError, TypeError) as e:
            raise ConfigError(
                f"Invalid value for {key} (expected {field_type.__name__}): {e}"
            ) from e

        if key in CONFIG_FIELD_RANGES:
            min_val, max_val = CONFIG_FIELD_RANGES[key]
            if not (min_val <= typed_value <= max_val):
                raise ConfigError(
                    f"Value {typed_value} out of range [{min_val}, {max_val}] for {key}"
                )

        setattr(self, key, typed_value)

    def apply_overrides(self, overrides: Dict[str, Any]) -> None:
        """Apply every override whose value is not None."""
        for key, value in overrides.items():
            if value is not None:
                self.apply_override(key, value)

    def validate(self) -> None:
        """
        Check the whole configuration before a run.

        Raises:
            ConfigError: on the first invalid value found
        """
        month_window(self.month)

        if not self.node_name:
            raise ConfigError("node_name must not be empty")
        if not _PUBKEY_RE.match(self.node_pubkey):
            raise ConfigError(f"invalid node pubkey '{self.node_pubkey}'")

        for peer in self.routing_peers:
            if not _PUBKEY_RE.match(peer.pubkey):
                raise ConfigError(
                    f"invalid pubkey '{peer.pubkey}' for routing peer '{peer.name}'"
                )

    def reporting_window(self) -> Tuple[datetime, datetime]:
        """Start (inclusive) and end (exclusive) of the reporting month."""
        return month_window(self.month)

    def snapshot(self) -> 'ConfigSnapshot':
        """Create an immutable snapshot for the report run."""
        return ConfigSnapshot.from_config(self)


@dataclass(frozen=True)
class ConfigSnapshot:
    """
    Immutable configuration snapshot for a single report run.

    The run captures a snapshot once, after all command line overrides are
    applied, and uses only that snapshot from then on.
    """
    month: str
    forwards_file: str
    channels_file: str
    closed_channels_file: str
    node_name: str
    node_pubkey: str
    routing_peers: Tuple[RoutingPeer, ...]
    open_fee_ppm: int
    open_min_msat: int

    @classmethod
    def from_config(cls, config: Config) -> 'ConfigSnapshot':
        """Create snapshot from mutable Config."""
        return cls(
            month=config.month,
            forwards_file=config.forwards_file,
            channels_file=config.channels_file,
            closed_channels_file=config.closed_channels_file,
            node_name=config.node_name,
            node_pubkey=config.node_pubkey,
            routing_peers=tuple(config.routing_peers),
            open_fee_ppm=config.open_fee_ppm,
            open_min_msat=config.open_min_msat,
        )

    def reporting_window(self) -> Tuple[datetime, datetime]:
        return month_window(self.month)
