"""The peer client: joins the tracker and connects to the peers it announces."""

from __future__ import annotations

import argparse
import json
import logging
import socket
import sys
import threading

from .events import Event
from .models import Message, PeerInfo
from .peer_id import generate_peer_id
from .peers import PeerManager

TRACKER_PORT = 6969
SELF_PORT = 5001
TRACKER_HOST = "127.0.0.1"
MAX_PEER_CONNECTIONS = 5
BUFFER_SIZE = 1024
INFO_HASH = "the_super_secret_hash"

log = logging.getLogger(__name__)


def handle_tracker_message(
    text: str | bytes, peer_id: str, add_peer_event: Event, send_request_event: Event
) -> list[PeerInfo]:
    """Act on a tracker message; on a join, announce every other peer on both events."""
    data = json.loads(text)
    if not isinstance(data, dict):
        raise TypeError("a message must be a JSON object")
    if data.get("type") != "join":
        return []
    payload = data.get("message")
    if not isinstance(payload, str):
        raise TypeError("a join message must carry a JSON string")
    entries = json.loads(payload)
    if not isinstance(entries, list):
        raise TypeError("a peer list must be a JSON array")
    peers = [PeerInfo.from_dict(entry) for entry in entries]
    announced = []
    for peer in peers:
        if peer.peer_id == peer_id:
            continue
        # Accepting and connecting must run together, or each side waits on the other.
        threads = [
            threading.Thread(target=add_peer_event.emit, args=(peer,)),
            threading.Thread(target=send_request_event.emit, args=(peer,)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        announced.append(peer)
    return announced


def read_messages(
    sock: socket.socket, peer_id: str, add_peer_event: Event, send_request_event: Event
) -> int:
    """Handle tracker messages until the connection ends; return how many were handled."""
    handled = 0
    while True:
        try:
            data = sock.recv(BUFFER_SIZE)
        except OSError as exc:
            log.error("reading from tracker failed: %s", exc)
            return handled
        if not data:
            return handled
        text = data.decode("utf-8", errors="replace")
        log.debug("message: %s", text)
        try:
            handle_tracker_message(text, peer_id, add_peer_event, send_request_event)
        except (ValueError, KeyError, TypeError) as exc:
            log.warning("ignoring malformed tracker message: %s", exc)
            continue
        handled += 1


def send_message(sock: socket.socket, message: Message) -> None:
    """Write a message to a socket as JSON."""
    sock.sendall(message.dumps().encode("utf-8"))


def main(argv: list[str] | None = None) -> int:
    """Join the tracker and connect to the peers it announces."""
    parser = argparse.ArgumentParser(prog="swarmlet-client", description="Join a swarm.")
    parser.add_argument("port", nargs="?", type=int, default=SELF_PORT)
    parser.add_argument("--tracker-host", default=TRACKER_HOST)
    parser.add_argument("--tracker-port", type=int, default=TRACKER_PORT)
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(level=logging.INFO)

    peer_id = generate_peer_id()
    try:
        tracker = socket.create_connection((args.tracker_host, args.tracker_port))
    except OSError as exc:
        print(
            f"error: failed to connect to the tracker {args.tracker_host}:{args.tracker_port}: {exc}",
            file=sys.stderr,
        )
        return 1
    with tracker:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        with listener:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                listener.bind(("0.0.0.0", args.port))
                listener.listen(MAX_PEER_CONNECTIONS)
            except OSError as exc:
                print(f"error: cannot listen on port {args.port}: {exc}", file=sys.stderr)
                return 1
            self_port = listener.getsockname()[1]
            self_info = PeerInfo(args.tracker_host, INFO_HASH, peer_id, self_port)
            manager = PeerManager(listener, self_info)

            add_peer_event: Event = Event()
            send_request_event: Event = Event()
            add_peer_event.subscribe(manager.add_peer)
            send_request_event.subscribe(manager.send_request)

            payload = json.dumps(self_info.to_dict(), separators=(",", ":"), sort_keys=True)
            try:
                send_message(tracker, Message(True, "join", payload))
            except OSError as exc:
                print(f"error: cannot reach the tracker: {exc}", file=sys.stderr)
                return 1
            try:
                read_messages(tracker, peer_id, add_peer_event, send_request_event)
            except KeyboardInterrupt:
                return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())