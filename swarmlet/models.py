"""Data records exchanged between the tracker and the peers, with JSON helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping


def _field(data: Mapping[str, Any], key: str, kind: type) -> Any:
    """Fetch a required key and check its JSON type."""
    if key not in data:
        raise KeyError(key)
    value = data[key]
    if kind is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    else:
        ok = isinstance(value, kind)
    if not ok:
        raise TypeError(
            f"field {key!r} must be of type {kind.__name__}, got {type(value).__name__}"
        )
    return value


@dataclass
class Block:
    """A slice of a piece: where it starts, how long it is and its download state."""

    piece_id: str
    offset: int
    size: int
    status: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "piece_id": self.piece_id,
            "offset": self.offset,
            "size": self.size,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Block":
        return cls(
            piece_id=_field(data, "piece_id", str),
            offset=_field(data, "offset", int),
            size=_field(data, "size", int),
            status=_field(data, "status", str),
        )


@dataclass
class Piece:
    """A piece of the shared file, made up of blocks."""

    piece_id: str
    size: int = 0
    blocks: list[Block] = field(default_factory=list)
    status: str = ""


@dataclass
class PeerInfo:
    """What is known about a peer in the swarm."""

    ip: str
    info_hash: str
    peer_id: str
    port: int
    choked: bool = False
    pieces_hash: list[str] = field(default_factory=list)
    socket: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "info_hash": self.info_hash,
            "ip": self.ip,
            "peer_id": self.peer_id,
            "port": self.port,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PeerInfo":
        return cls(
            ip=_field(data, "ip", str),
            info_hash=_field(data, "info_hash", str),
            peer_id=_field(data, "peer_id", str),
            port=_field(data, "port", int),
        )


@dataclass
class Message:
    """A protocol message: a success flag, a type tag and a string payload."""

    success: bool
    type: str
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "type": self.type, "message": self.message}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Message":
        return cls(
            success=_field(data, "success", bool),
            type=_field(data, "type", str),
            message=_field(data, "message", str),
        )

    def dumps(self) -> str:
        """Serialise to compact JSON with keys in sorted order."""
        return json.dumps(self.to_dict(), separators=(",", ":"), sort_keys=True)

    @classmethod
    def loads(cls, text: str | bytes) -> "Message":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise TypeError("a message must be a JSON object")
        return cls.from_dict(data)