"""
Snapshot loading for lsp-stats

Reads the three gzip-compressed JSON snapshots taken from the LSP node:

- listforwards:            {"forwards": [...]}
- listpeerchannels:        {"channels": [...]}
- listclosedchannels:      {"closedchannels": [...]}

and turns them into Forward / Channel records. Open and closed channels are
merged into one list so forwards over channels that have since closed can
still be attributed to a peer.

Amounts go through pyln's Millisatoshi, so both plain integers and the
legacy "1234msat" strings older lightningd versions emit are accepted.
"""

import gzip
import json
import logging
import zlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pyln.client import Millisatoshi

from .directory import ChannelDirectory
from .errors import SnapshotError

logger = logging.getLogger(__name__)


def _msat(value: Any) -> int:
    return Millisatoshi(value).millisatoshis


def _channel_id(value: Any) -> Optional[str]:
    """Channel ids as strings, None for absent or empty ones."""
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class Forward:
    """
    One routing event through the node.

    Attributes:
        in_channel: Channel the HTLC came in on (scid or alias)
        out_channel: Channel the HTLC went out on (scid or alias)
        fee_msat: Fee earned
        out_msat: Amount forwarded out
        received_time: Unix epoch seconds
    """
    in_channel: str
    out_channel: str
    fee_msat: int
    out_msat: int
    received_time: float

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Forward':
        return cls(
            in_channel=str(d["in_channel"]),
            out_channel=str(d["out_channel"]),
            fee_msat=_msat(d["fee_msat"]),
            out_msat=_msat(d["out_msat"]),
            received_time=float(d["received_time"]),
        )


@dataclass(frozen=True)
class Alias:
    """Local/remote scid aliases of a channel."""
    local: Optional[str] = None
    remote: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Alias':
        return cls(local=_channel_id(d.get("local")),
                   remote=_channel_id(d.get("remote")))


@dataclass(frozen=True)
class Channel:
    """
    A channel the node has or had with a peer.

    Attributes:
        short_channel_id: Confirmed scid, None if never confirmed on-chain
        alias: Scid aliases, None when the record carries no alias object
        peer_id: Node ID of the counterparty
    """
    peer_id: str
    short_channel_id: Optional[str] = None
    alias: Optional[Alias] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Channel':
        alias = d.get("alias")
        if alias is not None and not isinstance(alias, dict):
            raise TypeError(f"alias must be an object, got {type(alias).__name__}")
        peer_id = d["peer_id"]
        if not isinstance(peer_id, str):
            raise TypeError(f"peer_id must be a string, got {type(peer_id).__name__}")
        return cls(
            peer_id=peer_id,
            short_channel_id=_channel_id(d.get("short_channel_id")),
            alias=Alias.from_dict(alias) if alias is not None else None,
        )


@dataclass
class LspNodeData:
    """Forwards, merged channels and derived directory of one LSP node."""
    name: str
    pubkey: str
    forwards: List[Forward] = field(default_factory=list)
    channels: List[Channel] = field(default_factory=list)
    directory: ChannelDirectory = field(default_factory=ChannelDirectory)


def _load_json(path: str, what: str) -> Any:
    try:
        with gzip.open(path, "rt", encoding="utf-8") as f:
            return json.load(f)
    except gzip.BadGzipFile as e:
        # BadGzipFile is an OSError, so it must be caught first
        raise SnapshotError(path, f"failed to decompress {what} file: {e}") from e
    except (EOFError, zlib.error) as e:
        raise SnapshotError(path, f"failed to decompress {what} file: {e}") from e
    except OSError as e:
        raise SnapshotError(path, f"failed to open {what} file: {e}") from e
    except ValueError as e:
        raise SnapshotError(path, f"failed to decode {what} json: {e}") from e


def _records(path: str, what: str, key: str) -> List[Dict[str, Any]]:
    document = _load_json(path, what)
    if not isinstance(document, dict) or key not in document:
        raise SnapshotError(path, f"failed to decode {what} json: missing '{key}' array")
    records = document[key]
    if not isinstance(records, list):
        raise SnapshotError(path, f"failed to decode {what} json: '{key}' is not an array")
    return records


def _parse(path: str, what: str, key: str, factory) -> list:
    parsed = []
    for index, record in enumerate(_records(path, what, key)):
        try:
            if not isinstance(record, dict):
                raise TypeError(f"expected an object, got {type(record).__name__}")
            parsed.append(factory(record))
        except KeyError as e:
            raise SnapshotError(
                path, f"failed to decode {what} json: {key}[{index}] is missing {e}"
            ) from e
        except (TypeError, ValueError, ArithmeticError) as e:
            raise SnapshotError(
                path, f"failed to decode {what} json: {key}[{index}]: {e}"
            ) from e
    return parsed


def read_forwards(path: str) -> List[Forward]:
    """
    Read forwards from a listforwards snapshot.

    Every record is returned; take the snapshot with status=settled so only
    completed forwards are counted.
    """
    return _parse(path, "forwards", "forwards", Forward.from_dict)


def read_channels(path: str) -> List[Channel]:
    """Read channels from a listpeerchannels snapshot."""
    return _parse(path, "channels", "channels", Channel.from_dict)


def read_closed_channels(path: str) -> List[Channel]:
    """Read channels from a listclosedchannels snapshot."""
    return _parse(path, "closed channels", "closedchannels", Channel.from_dict)


def load_node_data(config) -> LspNodeData:
    """
    Load everything the statistics pass needs for the configured node.

    Args:
        config: Config or ConfigSnapshot naming the node and its snapshots

    Raises:
        SnapshotError: if any snapshot cannot be read, message prefixed
            with the node name
    """
    node = LspNodeData(name=config.node_name, pubkey=config.node_pubkey)
    try:
        node.forwards = read_forwards(config.forwards_file)
        node.channels = read_channels(config.channels_file)
        node.channels.extend(read_closed_channels(config.closed_channels_file))
    except SnapshotError as e:
        raise SnapshotError(e.path, e.message, node=node.name) from e

    node.directory = ChannelDirectory.from_channels(node.channels)
    logger.info(
        f"{node.name}: loaded {len(node.forwards)} forwards, "
        f"{len(node.channels)} channels, {len(node.directory)} channel ids"
    )
    return node
