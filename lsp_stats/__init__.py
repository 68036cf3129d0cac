"""
lsp-stats package

This package contains the modules of the LSP statistics report:
- config: Configuration, routing peers and the reporting window
- snapshots: Forward/Channel records and gzipped JSON snapshot loading
- directory: Channel id (scid / local alias) to peer lookup
- stats: Forward classification and aggregation
- report: Plain text report rendering
- cli: Command line entry point
"""

from .config import Config, ConfigSnapshot, RoutingPeer
from .directory import ChannelDirectory
from .errors import LspStatsError, ConfigError, SnapshotError, UnknownChannelError
from .snapshots import Forward, Channel, Alias, LspNodeData, load_node_data
from .stats import LspStats, RoutingStats, compute_lsp_stats, is_probable_open

__all__ = [
    'Config',
    'ConfigSnapshot',
    'RoutingPeer',
    'ChannelDirectory',
    'LspStatsError',
    'ConfigError',
    'SnapshotError',
    'UnknownChannelError',
    'Forward',
    'Channel',
    'Alias',
    'LspNodeData',
    'load_node_data',
    'LspStats',
    'RoutingStats',
    'compute_lsp_stats',
    'is_probable_open',
]
