"""Choosing which piece to fetch and writing received blocks to disk."""

from __future__ import annotations

import logging
import random
import socket
import time
from pathlib import Path
from typing import Iterable

from .models import Block, Piece
from .peers import PeerManager

CHUNK_SIZE = 1024

log = logging.getLogger(__name__)


class PieceManager:
    """Tracks the pieces still to fetch and stores the blocks that arrive."""

    def __init__(
        self,
        peer_manager: PeerManager,
        to_download: Iterable[Piece] = (),
        storage_dir: str | Path = ".",
        rng: random.Random | None = None,
    ) -> None:
        self.peer_manager = peer_manager
        self.to_download: list[Piece] = list(to_download)
        self.downloaded: dict[str, Piece] = {}
        self.storage_dir = Path(storage_dir)
        self.last_speed: float = 0.0
        self._rng = rng if rng is not None else random.Random()

    def initial_piece_selection(self) -> Piece:
        """Pick a random piece to start with and ask the peers for its blocks."""
        if not self.to_download:
            raise ValueError("no pieces to download")
        piece = self._rng.choice(self.to_download)
        self.peer_manager.download_handler(piece)
        return piece

    def downloader(self, piece_id: str, block: Block, sock: socket.socket) -> int:
        """Receive one block from a socket into the piece's file; return the bytes stored."""
        path = self.storage_dir / f"{piece_id}.tmp"
        mode = "r+b" if path.exists() else "w+b"
        block.status = "downloading"
        received = 0
        started = time.perf_counter()
        with path.open(mode) as handle:
            while received < block.size:
                try:
                    chunk = sock.recv(min(CHUNK_SIZE, block.size - received))
                except OSError as exc:
                    log.error("download of %s interrupted: %s", piece_id, exc)
                    break
                if not chunk:
                    break
                handle.seek(block.offset + received)
                handle.write(chunk)
                received += len(chunk)
        elapsed = time.perf_counter() - started
        self.last_speed = received / elapsed if elapsed > 0 else 0.0
        if received >= block.size:
            block.status = "downloaded"
        else:
            block.status = "not downloading"
        return received