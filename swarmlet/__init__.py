"""Peer-to-peer file sharing: a join tracker, a peer client, bencode decoding and piece bookkeeping."""

__version__ = "0.1.0"