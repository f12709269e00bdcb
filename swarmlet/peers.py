"""Connections between peers: handshakes, piece announcements and block transfer."""

from __future__ import annotations

import json
import logging
import socket
from pathlib import Path

from .models import Block, Message, Piece, PeerInfo

HANDSHAKE = "hash"
BUFFER_SIZE = 1024
CHUNK_SIZE = 1024
HANDSHAKE_ATTEMPTS = 10

log = logging.getLogger(__name__)


def _is_accepted(reply: bytes) -> bool:
    text = reply.decode("utf-8", errors="replace")
    if text == "accepted":
        return True
    try:
        return Message.loads(text).type == "accepted"
    except (ValueError, KeyError, TypeError):
        return False


class PeerManager:
    """Manages this peer's connections to the other peers in the swarm."""

    def __init__(self, server_sock: socket.socket, self_info: PeerInfo, storage_dir: str | Path = ".") -> None:
        self.server_sock = server_sock
        self.self_info = self_info
        self.storage_dir = Path(storage_dir)
        self.peer_map: dict[str, socket.socket] = {}
        self.piece_map: dict[str, list[PeerInfo]] = {}

    def add_peer(self, peer: PeerInfo) -> bool:
        """Accept an incoming connection from a peer and keep it if the handshake holds."""
        try:
            conn, _ = self.server_sock.accept()
        except OSError as exc:
            log.error("peer cannot be connected: %s", exc)
            return False
        try:
            data = conn.recv(BUFFER_SIZE)
        except OSError:
            conn.close()
            return False
        if not self.hand_shake(data.decode("utf-8", errors="replace"), HANDSHAKE):
            conn.close()
            log.info("handshake failed")
            return False
        try:
            conn.sendall(HANDSHAKE.encode("utf-8"))
        except OSError:
            conn.close()
            return False
        # Only one side of a pair keeps the accepted connection.
        if self.self_info.peer_id < peer.peer_id:
            conn.close()
            return False
        self.peer_map[peer.peer_id] = conn
        log.info("known peers: %s", ", ".join(self.peer_map))
        return True

    def send_request(self, peer: PeerInfo) -> socket.socket | None:
        """Connect to a peer and handshake; return the socket, or None on failure."""
        try:
            sock = socket.create_connection((peer.ip, peer.port))
        except OSError as exc:
            log.error("could not connect to peer: %s", exc)
            return None
        try:
            sock.sendall(HANDSHAKE.encode("utf-8"))
        except OSError:
            sock.close()
            return None
        data = None
        for _ in range(HANDSHAKE_ATTEMPTS):
            try:
                data = sock.recv(BUFFER_SIZE)
                break
            except OSError:
                continue
        if data is None:
            log.error("handshake empty")
            sock.close()
            return None
        if not self.hand_shake(data.decode("utf-8", errors="replace"), HANDSHAKE):
            log.error("handshake failed")
            sock.close()
            return None
        return sock

    def hand_shake(self, received: str, local_hash: str) -> bool:
        """A handshake holds when the received hash equals ours."""
        return received == local_hash

    def message_handler(self, message: Message, peer: PeerInfo) -> None:
        """React to a message from a peer: have, interested or request."""
        if message.type == "have":
            holders = self.piece_map.setdefault(message.message, [])
            if all(holder.peer_id != peer.peer_id for holder in holders):
                holders.append(peer)
        elif message.type == "interested":
            self.send_message(Message(True, "accepted", ""), peer.socket)
        elif message.type == "request":
            data = json.loads(message.message)
            if not isinstance(data, dict):
                raise TypeError("a block request must be a JSON object")
            block = Block.from_dict({"status": "", **data})
            self._send_block(block, peer.socket)

    def _send_block(self, block: Block, sock: socket.socket) -> int:
        path = self.storage_dir / f"{block.piece_id}.tmp"
        sent = 0
        with path.open("rb") as handle:
            handle.seek(block.offset)
            while sent < block.size:
                chunk = handle.read(min(CHUNK_SIZE, block.size - sent))
                if not chunk:
                    break
                sock.sendall(chunk)
                sent += len(chunk)
        return sent

    def send_message(self, message: Message, sock: socket.socket) -> bool:
        """Send a message as JSON; report whether it went out."""
        try:
            sock.sendall(message.dumps().encode("utf-8"))
        except OSError as exc:
            log.error("failed to send message: %s", exc)
            return False
        return True

    def download_handler(self, piece: Piece) -> list[Block]:
        """Ask the peers holding a piece for its blocks, one block per peer."""
        requested: list[Block] = []
        holders = self.piece_map.get(piece.piece_id, [])
        for peer, block in zip(holders, piece.blocks):
            if not self.send_message(Message(True, "interested", ""), peer.socket):
                return requested
            try:
                reply = peer.socket.recv(BUFFER_SIZE)
            except OSError:
                log.error("not interested")
                return requested
            if not _is_accepted(reply):
                log.info("not accepted")
                return requested
            payload = json.dumps(
                {"offset": block.offset, "piece_id": block.piece_id, "size": block.size},
                separators=(",", ":"),
                sort_keys=True,
            )
            self.send_message(Message(True, "request", payload), peer.socket)
            requested.append(block)
        return requested