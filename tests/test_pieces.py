import random
import socket

import pytest

from swarmlet.models import Block, Message, PeerInfo, Piece
from swarmlet.peers import PeerManager
from swarmlet.pieces import PieceManager


class RecordingPeerManager:
    def __init__(self):
        self.requested = []

    def download_handler(self, piece):
        self.requested.append(piece)
        return []


def _pieces():
    return [Piece("p1", 4, [Block("p1", 0, 4)]), Piece("p2", 4, [Block("p2", 0, 4)])]


def test_initial_selection_picks_listed_piece_and_requests_it():
    recorder = RecordingPeerManager()
    pieces = _pieces()
    manager = PieceManager(recorder, pieces, rng=random.Random(3))
    chosen = manager.initial_piece_selection()
    assert chosen in pieces
    assert recorder.requested == [chosen]


def test_initial_selection_is_reproducible_with_seed():
    first = PieceManager(RecordingPeerManager(), _pieces(), rng=random.Random(7))
    second = PieceManager(RecordingPeerManager(), _pieces(), rng=random.Random(7))
    assert first.initial_piece_selection() == second.initial_piece_selection()


def test_initial_selection_without_pieces_raises():
    manager = PieceManager(RecordingPeerManager())
    with pytest.raises(ValueError):
        manager.initial_piece_selection()


def test_downloader_writes_at_offset(tmp_path):
    manager = PieceManager(RecordingPeerManager(), storage_dir=tmp_path)
    reader, writer = socket.socketpair()
    with reader, writer:
        writer.sendall(b"hello")
        writer.shutdown(socket.SHUT_WR)
        block = Block("piece", 3, 5)
        stored = manager.downloader("piece", block, reader)
    assert stored == 5
    assert block.status == "downloaded"
    assert (tmp_path / "piece.tmp").read_bytes() == b"\x00\x00\x00hello"


def test_downloader_short_stream_is_not_complete(tmp_path):
    manager = PieceManager(RecordingPeerManager(), storage_dir=tmp_path)
    reader, writer = socket.socketpair()
    with reader, writer:
        writer.sendall(b"ab")
        writer.shutdown(socket.SHUT_WR)
        block = Block("short", 0, 10)
        stored = manager.downloader("short", block, reader)
    assert stored == 2
    assert block.status != "downloaded"
    assert (tmp_path / "short.tmp").read_bytes() == b"ab"


def test_downloader_keeps_existing_content(tmp_path):
    (tmp_path / "keep.tmp").write_bytes(b"abcdef")
    manager = PieceManager(RecordingPeerManager(), storage_dir=tmp_path)
    reader, writer = socket.socketpair()
    with reader, writer:
        writer.sendall(b"XY")
        writer.shutdown(socket.SHUT_WR)
        manager.downloader("keep", Block("keep", 2, 2), reader)
    assert (tmp_path / "keep.tmp").read_bytes() == b"abXYef"


def test_block_round_trip_between_peers(tmp_path):
    source_dir = tmp_path / "source"
    target_dir = tmp_path / "target"
    source_dir.mkdir()
    target_dir.mkdir()
    content = bytes(range(256)) * 12
    (source_dir / "big.tmp").write_bytes(content)

    sender_sock, receiver_sock = socket.socketpair()
    with sender_sock, receiver_sock:
        uploader = PeerManager(None, PeerInfo("127.0.0.1", "h", "a", 1), source_dir)
        peer = PeerInfo("127.0.0.1", "h", "b", 2, socket=sender_sock)
        request = Message(True, "request", '{"offset": 100, "piece_id": "big", "size": 2500}')
        uploader.message_handler(request, peer)
        sender_sock.shutdown(socket.SHUT_WR)

        downloader = PieceManager(RecordingPeerManager(), storage_dir=target_dir)
        block = Block("big", 100, 2500)
        stored = downloader.downloader("big", block, receiver_sock)

    assert stored == 2500
    assert (target_dir / "big.tmp").read_bytes()[100:2600] == content[100:2600]