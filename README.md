# swarmlet

A small peer-to-peer file sharing toolkit. It contains:

- a **tracker** (`swarmlet.tracker`) that accepts peer connections, keeps the
  list of peers that have joined and sends the updated list to every connected
  peer whenever someone joins;
- a **client** (`swarmlet.client`) that joins the tracker, listens on its own
  port and, for every other peer the tracker announces, both accepts a
  connection from it and connects to it, checking a fixed handshake string;
- a **bencode** decoder (`swarmlet.bencode`) for torrent-style metadata;
- data models (`swarmlet.models`: `Block`, `Piece`, `PeerInfo`, `Message`)
  with JSON helpers, a publish/subscribe `Event` (`swarmlet.events`), a
  peer-id generator (`swarmlet.peer_id`), and the `PeerManager`
  (`swarmlet.peers`) and `PieceManager` (`swarmlet.pieces`) classes.

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Command-line use

Start the tracker. By default it listens on `0.0.0.0`, port 6969:

```
swarmlet-tracker
swarmlet-tracker --host 127.0.0.1 --port 6969
```

Start a client that listens for other peers on port 5001 and joins the tracker
at `127.0.0.1:6969` (the defaults):

```
swarmlet-client 5001
```

The tracker can be chosen with `--tracker-host` and `--tracker-port`. Start a
second client on another port to see the two peers discover each other:

```
swarmlet-client 5002
```

Decode a bencoded file and print it as JSON-like text (dictionary keys
sorted, one element per line). Without a file name, standard input is read.
Invalid input is reported on standard error with exit status 1:

```
swarmlet-bencode metadata.torrent
```

## Library use

```python
from swarmlet.bencode import decode, render
from swarmlet.events import Event
from swarmlet.models import Message, PeerInfo
from swarmlet.peer_id import generate_peer_id

value = decode("d4:name4:spam6:lengthi42ee")
print(render(value))

peer = PeerInfo.from_dict(
    {"ip": "127.0.0.1", "info_hash": "hash", "peer_id": generate_peer_id(), "port": 5001}
)

joined = Event()
listener_id = joined.subscribe(lambda info: print("joined:", info.peer_id))
joined.emit(peer)
joined.unsubscribe(listener_id)

text = Message(success=True, type="join", message="hello").dumps()
assert Message.loads(text).message == "hello"
```

Notes on behaviour:

- `decode` accepts `str` or `bytes` (bytes are read as Latin-1) and raises
  `BencodeError`, a `ValueError`, on malformed input. Strings decode to `str`.
- `generate_peer_id()` returns a random UUID in its canonical text form.
- `Message.dumps()` writes compact JSON with sorted keys; `from_dict` and
  `loads` raise `KeyError` for a missing field and `TypeError` for a field of
  the wrong JSON type.
- `Event.subscribe` returns an integer id; `unsubscribe` ignores unknown ids.

## Wire format

Messages travel between tracker and peers as JSON objects with the keys
`success`, `type` and `message`. A client joins by sending a `join` message
whose `message` field holds its own `PeerInfo` as a JSON string; the tracker
answers every connection with a `join` message whose `message` field holds the
JSON array of all peers that have joined. Peers greet each other with the
handshake string `hash`.

Between peers, `PeerManager.message_handler` understands `have` (records which
peers hold a piece), `interested` (answers `accepted`) and `request` (sends
the requested block from the file `<piece_id>.tmp` in its storage directory).
`PeerManager.download_handler` asks the holders of a piece for its blocks, one
block per peer, and `PieceManager.downloader` writes a received block into
`<piece_id>.tmp` at the block's offset.

## What it does not do

- The client only joins the swarm and performs handshakes; it does not
  download or upload any file. The piece exchange in `PeerManager` and
  `PieceManager` is available as a library but no command drives it.
- Nothing reads a torrent file into `Piece` and `Block` records, checks piece
  hashes, or assembles downloaded pieces into the final file.
- There is no choking, rarest-first selection or re-requesting of failed
  blocks; `PieceManager.initial_piece_selection` picks a random piece.
- The tracker keeps its peer list in memory only and never removes a peer
  from it.