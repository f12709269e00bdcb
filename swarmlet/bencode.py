"""A decoder for bencoded data and a printer for the decoded values."""

from __future__ import annotations

import re
import sys
from typing import Union

BencodeValue = Union[int, str, list, dict]

_DIGITS = "0123456789"
_INT_PREFIX = re.compile(r"\s*([+-]?[0-9]+)")


class BencodeError(ValueError):
    """Raised when the input is not valid bencode."""


def _to_int(text: str) -> int:
    match = _INT_PREFIX.match(text)
    if match is None:
        raise BencodeError(f"invalid integer {text!r}")
    return int(match.group(1))


class BencodeParser:
    """Decodes one bencoded value from a string, tracking its read position."""

    def __init__(self, data: str) -> None:
        self.data = data
        self.index = 0

    def _peek(self) -> str:
        if self.index >= len(self.data):
            raise BencodeError("Invalid Bencode input")
        return self.data[self.index]

    def decode(self) -> BencodeValue:
        head = self._peek()
        if head == "i":
            return self.decode_int()
        if head in _DIGITS:
            return self.decode_string()
        if head == "l":
            return self.decode_list()
        if head == "d":
            return self.decode_dict()
        raise BencodeError("Invalid Bencode input")

    def decode_int(self) -> int:
        self.index += 1
        end = self.data.find("e", self.index)
        if end < 0:
            raise BencodeError("unterminated integer")
        value = _to_int(self.data[self.index:end])
        self.index = end + 1
        return value

    def decode_string(self) -> str:
        colon = self.data.find(":", self.index)
        if colon < 0:
            raise BencodeError("missing ':' in string length")
        length = _to_int(self.data[self.index:colon])
        if length < 0:
            raise BencodeError("negative string length")
        start = colon + 1
        if start + length > len(self.data):
            raise BencodeError("string runs past end of input")
        self.index = start + length
        return self.data[start:self.index]

    def decode_list(self) -> list:
        self.index += 1
        items = []
        while self._peek() != "e":
            items.append(self.decode())
        self.index += 1
        return items

    def decode_dict(self) -> dict:
        self.index += 1
        result: dict[str, BencodeValue] = {}
        while self._peek() != "e":
            key = self.decode_string()
            result[key] = self.decode()
        self.index += 1
        return result


def decode(data: str | bytes) -> BencodeValue:
    """Decode the first bencoded value in data; bytes are read as Latin-1."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("latin-1")
    return BencodeParser(data).decode()


def render(value: BencodeValue) -> str:
    """Format a decoded value as JSON-like text, one element per line."""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, list):
        parts = [render(item) for item in value]
        body = ",\n".join(parts) + ("\n" if parts else "")
        return "[\n" + body + "]"
    if isinstance(value, dict):
        parts = [f'"{key}": {render(value[key])}' for key in sorted(value)]
        body = ",\n".join(parts) + ("\n" if parts else "")
        return "{\n" + body + "}"
    raise TypeError(f"cannot render {type(value).__name__}")


def main(argv: list[str] | None = None) -> int:
    """Decode a bencoded file (or standard input) and print it."""
    args = sys.argv[1:] if argv is None else argv
    if args:
        with open(args[0], "rb") as handle:
            raw = handle.read()
    else:
        raw = sys.stdin.buffer.read()
    try:
        value = decode(raw)
    except BencodeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    sys.stdout.write(render(value))
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())