"""
Error types for lsp-stats.

Every failure is fatal for a report run: the CLI catches LspStatsError at the
top level, prints the message and exits non-zero without emitting a report.
"""


class LspStatsError(Exception):
    """Base class for all report-run failures."""


class ConfigError(LspStatsError):
    """Invalid configuration value (bad month, pubkey, override, ...)."""


class SnapshotError(LspStatsError):
    """A snapshot file could not be opened, decompressed or decoded."""

    def __init__(self, path: str, message: str, node: str = ""):
        self.path = path
        self.message = message
        self.node = node
        prefix = f"{node}: " if node else ""
        super().__init__(f"{prefix}{path}: {message}")


class UnknownChannelError(LspStatsError):
    """A forward references a channel that is in neither channel snapshot."""

    def __init__(self, channel_id: str):
        self.channel_id = channel_id
        super().__init__(f"channel '{channel_id}' was not in channel peer lookup")
