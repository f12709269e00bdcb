"""Generation of peer identifiers."""

import uuid


def generate_peer_id() -> str:
    """Return a fresh random identifier in canonical UUID text form."""
    return str(uuid.uuid4())