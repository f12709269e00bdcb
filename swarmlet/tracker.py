"""The tracker: accepts peers, records who joined and tells every peer about the swarm."""

from __future__ import annotations

import argparse
import json
import logging
import socket
import sys
import threading
from typing import Any, Union

from .events import Event
from .models import Message, PeerInfo

MAX_CONNECTIONS = 10
PORT = 6969
BUFFER_SIZE = 1024
INFO_HASH = "the_super_secret_hash"

log = logging.getLogger(__name__)

ParsedMessage = Union[PeerInfo, Message]


def _peer_list_json(peers: list[PeerInfo]) -> str:
    return json.dumps(
        [peer.to_dict() for peer in peers], separators=(",", ":"), sort_keys=True
    )


class TrackerConnection:
    """One peer's connection to the tracker."""

    def __init__(self, sock: socket.socket, address: Any = None, event: Event | None = None) -> None:
        self.sock = sock
        self.address = address
        self.event: Event = event if event is not None else Event()

    def send_message(self, message: Message) -> None:
        """Write a message to the peer as JSON."""
        self.sock.sendall(message.dumps().encode("utf-8"))

    def receive_message(self) -> str:
        """Read what the peer sent; an empty string means nothing more will come."""
        try:
            data = self.sock.recv(BUFFER_SIZE)
        except OSError:
            return ""
        text = data.decode("utf-8", errors="replace")
        if text:
            log.debug("message: %s", text)
        return text

    def parse_message(self, text: str | bytes) -> ParsedMessage:
        """Interpret a message; a successful join announces the joining peer."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise TypeError("a message must be a JSON object")
        if data.get("success") and data.get("type") == "join":
            payload = data.get("message")
            if not isinstance(payload, str):
                raise TypeError("a join message must carry a JSON string")
            info_data = json.loads(payload)
            if not isinstance(info_data, dict):
                raise TypeError("peer information must be a JSON object")
            info = PeerInfo.from_dict(info_data)
            self.event.emit(info)
            return info
        return Message.from_dict(data)

    def handle(self) -> None:
        """Process messages until the peer goes away, then close the socket."""
        try:
            while True:
                text = self.receive_message()
                if not text:
                    break
                try:
                    self.parse_message(text)
                except (ValueError, KeyError, TypeError) as exc:
                    log.warning("ignoring malformed message from %s: %s", self.address, exc)
        finally:
            self.sock.close()
            log.info("connection %s closed", self.address)


class Tracker:
    """Keeps the list of joined peers and broadcasts it on every join."""

    def __init__(self, max_connections: int = MAX_CONNECTIONS) -> None:
        self.event: Event = Event()
        self.peer_list: list[PeerInfo] = []
        self.connections: dict[int, TrackerConnection] = {}
        self.max_connections = max_connections
        self.server_address: tuple | None = None
        self.ready = threading.Event()
        self._next_id = 0
        self._lock = threading.Lock()
        self.event.subscribe(self.update_peer_list)

    def update_peer_list(self, info: PeerInfo) -> str:
        """Record a new peer and send the whole peer list to every connection."""
        with self._lock:
            self.peer_list.append(info)
            payload = _peer_list_json(self.peer_list)
            targets = list(self.connections.items())
        message = Message(True, "join", payload)
        for connection_id, connection in targets:
            try:
                connection.send_message(message)
            except OSError as exc:
                log.warning("could not update connection %d: %s", connection_id, exc)
        return payload

    def _run(self, connection_id: int, connection: TrackerConnection) -> None:
        try:
            connection.handle()
        finally:
            with self._lock:
                self.connections.pop(connection_id, None)

    def serve(self, host: str = "0.0.0.0", port: int = PORT) -> None:
        """Listen for peers and handle each connection on its own thread."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server:
            server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server.bind((host, port))
            server.listen(self.max_connections)
            self.server_address = server.getsockname()
            self.ready.set()
            log.info("listening on %s:%d", *self.server_address[:2])
            while True:
                if len(self.connections) >= self.max_connections:
                    log.warning("max connections of %d reached", self.max_connections)
                try:
                    client, address = server.accept()
                except ConnectionAbortedError:
                    continue
                connection = TrackerConnection(client, address, self.event)
                with self._lock:
                    connection_id = self._next_id
                    self._next_id += 1
                    self.connections[connection_id] = connection
                threading.Thread(
                    target=self._run, args=(connection_id, connection), daemon=True
                ).start()


def main(argv: list[str] | None = None) -> int:
    """Run the tracker until interrupted."""
    parser = argparse.ArgumentParser(prog="swarmlet-tracker", description="Run the tracker.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(level=logging.INFO)
    try:
        Tracker().serve(args.host, args.port)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())