import uuid

from swarmlet.peer_id import generate_peer_id


def test_peer_id_is_canonical_uuid4():
    peer_id = generate_peer_id()
    parsed = uuid.UUID(peer_id)
    assert str(parsed) == peer_id
    assert parsed.version == 4


def test_peer_id_length():
    assert len(generate_peer_id()) == 36


def test_peer_ids_are_unique():
    ids = {generate_peer_id() for _ in range(100)}
    assert len(ids) == 100