"""
Channel Directory for lsp-stats

Maps every identifier a forward may use for one of our channels to the
node ID of the peer on the other side:

- short_channel_id: the confirmed on-chain scid
- alias.local: the scid alias we assigned, the only way to reach a
  channel that never confirmed (zeroconf opens)

The remote alias is the one our peer uses for the channel; it never shows
up in our own listforwards and is not indexed.

Identifier collisions (an scid or alias reused for a different peer) are
resolved last-write-wins and logged.
"""

import logging
from typing import Dict, Iterable, Optional, TYPE_CHECKING

from .errors import UnknownChannelError

if TYPE_CHECKING:
    from .snapshots import Channel

logger = logging.getLogger(__name__)


class ChannelDirectory:
    """Read-only lookup from channel identifier to peer node ID."""

    def __init__(self, lookup: Optional[Dict[str, str]] = None):
        self._lookup: Dict[str, str] = dict(lookup or {})

    @classmethod
    def from_channels(cls, channels: Iterable['Channel']) -> 'ChannelDirectory':
        """
        Build the directory from the merged open + closed channel list.

        Args:
            channels: Channel records; later records win on collisions

        Returns:
            ChannelDirectory with one entry per scid and local alias
        """
        lookup: Dict[str, str] = {}

        def register(channel_id: Optional[str], peer_id: str) -> None:
            if not channel_id:
                return
            previous = lookup.get(channel_id)
            if previous is not None and previous != peer_id:
                logger.warning(
                    f"channel id '{channel_id}' maps to both {previous} and "
                    f"{peer_id}, using {peer_id}"
                )
            lookup[channel_id] = peer_id

        for channel in channels:
            register(channel.short_channel_id, channel.peer_id)
            if channel.alias is not None:
                register(channel.alias.local, channel.peer_id)

        return cls(lookup)

    def peer_for(self, channel_id: str) -> str:
        """
        Resolve a channel identifier to the peer's node ID.

        Raises:
            UnknownChannelError: if the identifier is in neither snapshot
        """
        try:
            return self._lookup[channel_id]
        except KeyError:
            raise UnknownChannelError(channel_id) from None

    def get(self, channel_id: str, default: Optional[str] = None) -> Optional[str]:
        return self._lookup.get(channel_id, default)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self._lookup

    def __len__(self) -> int:
        return len(self._lookup)
