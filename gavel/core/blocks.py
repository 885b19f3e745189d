"""Block reference parsing.

Accepted forms:
    (absent)      -> latest block
    "1234"        -> height, decimal
    "0x4d2"       -> height, hexadecimal
    "0x" + 64 hex -> block hash
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from gavel.core.errors import InvalidBlockNumberError

MAX_HEIGHT = 2**64 - 1
HASH_HEX_LENGTH = 64

_DECIMAL_RE = re.compile(r"^[0-9]+$")
_HEX_RE = re.compile(r"^0x([0-9a-fA-F]+)$")


class BlockKind(Enum):
    LATEST = "latest"
    HEIGHT = "height"
    HASH = "hash"


@dataclass(frozen=True)
class BlockReference:
    """A block identified by height, by hash, or as the chain head."""

    kind: BlockKind
    height: int | None = None
    hash: str | None = None

    @classmethod
    def latest(cls) -> BlockReference:
        return cls(BlockKind.LATEST)

    @classmethod
    def at_height(cls, height: int) -> BlockReference:
        return cls(BlockKind.HEIGHT, height=height)

    @classmethod
    def at_hash(cls, block_hash: str) -> BlockReference:
        return cls(BlockKind.HASH, hash=block_hash.lower())

    @property
    def is_latest(self) -> bool:
        return self.kind is BlockKind.LATEST

    def __str__(self) -> str:
        if self.kind is BlockKind.HEIGHT:
            return str(self.height)
        if self.kind is BlockKind.HASH:
            return str(self.hash)
        return "latest"


def parse_block_reference(value: str | None) -> BlockReference:
    """Parse a single optional block identifier.

    Args:
        value: Decimal height, 0x-prefixed hex height or hash, or None.

    Returns:
        The parsed BlockReference. None yields the latest block.

    Raises:
        InvalidBlockNumberError: If value is given but not parseable.
    """
    if value is None:
        return BlockReference.latest()

    text = value.strip()
    if not text:
        raise InvalidBlockNumberError(value, "empty value")

    if _DECIMAL_RE.match(text):
        return BlockReference.at_height(_checked_height(value, int(text)))

    match = _HEX_RE.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == HASH_HEX_LENGTH:
            return BlockReference.at_hash(text)
        return BlockReference.at_height(_checked_height(value, int(digits, 16)))

    raise InvalidBlockNumberError(value)


def parse_block_references(values: str | Sequence[str] | None) -> list[BlockReference]:
    """Parse a comma-separated list (or several of them) of block identifiers.

    Every element is parsed before anything is returned; one bad element
    fails the whole list.

    Args:
        values: A string, a sequence of strings, or None. Each string may
            hold several comma-separated identifiers.

    Returns:
        References in input order, or [latest] when no value was given.

    Raises:
        InvalidBlockNumberError: On the first unparseable element.
    """
    if values is None:
        return [BlockReference.latest()]
    if isinstance(values, str):
        values = [values]
    if not values:
        return [BlockReference.latest()]

    references: list[BlockReference] = []
    for chunk in values:
        for element in chunk.split(","):
            references.append(parse_block_reference(element))
    return references


def _checked_height(raw: str, height: int) -> int:
    if height > MAX_HEIGHT:
        raise InvalidBlockNumberError(raw, "exceeds 64-bit block height")
    return height


def parse_hex_number(value: object) -> int:
    """Parse a node-reported hex quantity such as a header's ``number``.

    Raises:
        ValueError: If value is not a 0x-prefixed hex string or an int.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        match = _HEX_RE.match(value)
        if match:
            return int(match.group(1), 16)
    raise ValueError(f"expected 0x-prefixed hex number, got {value!r}")
