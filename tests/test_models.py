import json

import pytest

from swarmlet.models import Block, Message, PeerInfo, Piece


def test_block_round_trip():
    block = Block("p1", 1024, 512, "downloading")
    assert Block.from_dict(block.to_dict()) == block


def test_block_to_dict_keys():
    block = Block("p1", 0, 16, "downloaded")
    assert block.to_dict() == {
        "piece_id": "p1",
        "offset": 0,
        "size": 16,
        "status": "downloaded",
    }


def test_block_missing_field_raises():
    with pytest.raises(KeyError):
        Block.from_dict({"piece_id": "p1", "offset": 0, "size": 16})


def test_block_wrong_type_raises():
    with pytest.raises(TypeError):
        Block.from_dict({"piece_id": "p1", "offset": "0", "size": 16, "status": ""})


def test_piece_defaults():
    piece = Piece("p9")
    assert piece.blocks == [] and piece.size == 0 and piece.status == ""


def test_peer_info_to_dict_has_wire_fields_only():
    peer = PeerInfo("127.0.0.1", "hash", "abc", 5001, choked=True, pieces_hash=["x"])
    assert peer.to_dict() == {
        "info_hash": "hash",
        "ip": "127.0.0.1",
        "peer_id": "abc",
        "port": 5001,
    }


def test_peer_info_round_trip():
    peer = PeerInfo("10.0.0.2", "the_super_secret_hash", "id-1", 6969)
    assert PeerInfo.from_dict(peer.to_dict()) == peer


def test_peer_info_list_from_json():
    text = json.dumps([PeerInfo("1.2.3.4", "h", "a", 1).to_dict(),
                       PeerInfo("1.2.3.5", "h", "b", 2).to_dict()])
    peers = [PeerInfo.from_dict(d) for d in json.loads(text)]
    assert [p.peer_id for p in peers] == ["a", "b"]
    assert [p.port for p in peers] == [1, 2]


def test_peer_info_missing_port():
    with pytest.raises(KeyError):
        PeerInfo.from_dict({"ip": "1.2.3.4", "info_hash": "h", "peer_id": "a"})


def test_peer_info_bool_port_rejected():
    with pytest.raises(TypeError):
        PeerInfo.from_dict({"ip": "1.2.3.4", "info_hash": "h", "peer_id": "a", "port": True})


def test_message_dumps_is_compact_and_sorted():
    assert Message(True, "join", "x").dumps() == '{"message":"x","success":true,"type":"join"}'


def test_message_round_trip():
    msg = Message(False, "request", '{"piece_id":"p"}')
    assert Message.loads(msg.dumps()) == msg


def test_message_loads_bytes():
    msg = Message(True, "have", "p3")
    assert Message.loads(msg.dumps().encode()) == msg


def test_message_loads_rejects_non_object():
    with pytest.raises(TypeError):
        Message.loads("[1, 2]")


def test_message_loads_missing_key():
    with pytest.raises(KeyError):
        Message.loads('{"success": true, "type": "join"}')


def test_message_loads_invalid_json():
    with pytest.raises(json.JSONDecodeError):
        Message.loads("{not json")