"""The fetch and mmr commands.

Each command has two layers:
- fetch_block() / collect_mmr_proofs() drive an open GavelClient and raise
  GavelError subclasses on failure.
- cmd_fetch() / cmd_mmr() validate input, open the connection, print the
  result and return a process exit code.

All input is validated before any connection is attempted.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from gavel.cli.output import print_error, print_json
from gavel.client import GavelClient
from gavel.config.schema import Config
from gavel.core.blocks import (
    BlockKind,
    BlockReference,
    parse_block_reference,
    parse_block_references,
    parse_hex_number,
)
from gavel.core.endpoint import resolve_endpoint
from gavel.core.errors import (
    EXIT_OK,
    BlockNotFoundError,
    GavelError,
    PartialBatchFailureError,
    RequestFailedError,
)

logger = logging.getLogger(__name__)


@dataclass
class MmrProof:
    """An MMR proof returned by the node for one requested block."""

    reference: BlockReference
    block_number: int
    proof: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "block": str(self.reference),
            "block_number": self.block_number,
            "proof": self.proof,
        }


async def resolve_block_hash(client: GavelClient, reference: BlockReference) -> str:
    """Turn a reference into a block hash, asking the node where needed.

    Raises:
        BlockNotFoundError: If the node knows no block at that height.
    """
    if reference.kind is BlockKind.HASH:
        return str(reference.hash)

    if reference.kind is BlockKind.LATEST:
        block_hash = await client.get_head()
    else:
        assert reference.height is not None
        block_hash = await client.get_block_hash(reference.height)

    if block_hash is None:
        raise BlockNotFoundError(reference)
    if not isinstance(block_hash, str):
        raise RequestFailedError(f"Expected block hash string, got {type(block_hash).__name__}")
    return block_hash


async def fetch_block(client: GavelClient, reference: BlockReference) -> Any:
    """Fetch the block for a reference.

    Returns:
        The block data exactly as the node returned it.

    Raises:
        BlockNotFoundError: If the node has no such block.
    """
    block_hash = await resolve_block_hash(client, reference)
    logger.debug("Fetching block %s (hash %s)", reference, block_hash)
    block = await client.get_block(block_hash)
    if block is None:
        raise BlockNotFoundError(reference)
    return block


def _header_number(block: Any) -> int:
    try:
        return parse_hex_number(block["block"]["header"]["number"])
    except (KeyError, TypeError, ValueError) as e:
        raise RequestFailedError(f"Block response has no usable header number: {e}") from e


async def resolve_block_height(client: GavelClient, reference: BlockReference) -> int:
    """Turn a reference into a block height, asking the node where needed."""
    if reference.kind is BlockKind.HEIGHT:
        assert reference.height is not None
        return reference.height

    block = await fetch_block(client, reference)
    height = _header_number(block)
    logger.debug("Resolved block %s to height %d", reference, height)
    return height


async def collect_mmr_proofs(
    client: GavelClient,
    references: Sequence[BlockReference],
) -> list[MmrProof]:
    """Generate one MMR proof per reference, sequentially on one connection.

    The batch is all-or-nothing: the first failure stops the remaining
    requests and discards what was already collected.

    Raises:
        PartialBatchFailureError: Naming the failed reference and its cause.
    """
    proofs: list[MmrProof] = []
    for reference in references:
        try:
            height = await resolve_block_height(client, reference)
            proof = await client.generate_mmr_proof([height])
        except GavelError as e:
            logger.debug("MMR batch aborted at %s after %d proofs", reference, len(proofs))
            raise PartialBatchFailureError(reference, e) from e
        proofs.append(MmrProof(reference=reference, block_number=height, proof=proof))
    return proofs


async def cmd_fetch(
    endpoint: str,
    block_number: str | None = None,
    resolve: str | None = None,
    config: Config | None = None,
) -> int:
    """Fetch a block and print it as JSON.

    Args:
        endpoint: ws:// or wss:// URL of the node.
        block_number: Decimal or 0x-hex height, 0x block hash, or None for latest.
        resolve: Optional IPv4 address to connect to instead of DNS.
        config: Loaded configuration.

    Returns:
        Exit code: 0 on success, the error's exit code otherwise.
    """
    try:
        target = resolve_endpoint(endpoint, resolve)
        reference = parse_block_reference(block_number)
        async with GavelClient(target, config) as client:
            block = await fetch_block(client, reference)
    except GavelError as e:
        print_error(e.message)
        return e.exit_code

    print_json(block)
    return EXIT_OK


async def cmd_mmr(
    endpoint: str,
    block_numbers: Sequence[str] | None = None,
    resolve: str | None = None,
    config: Config | None = None,
) -> int:
    """Generate MMR proofs and print them as a JSON array.

    Args:
        endpoint: ws:// or wss:// URL of the node.
        block_numbers: Comma-separated block identifiers (one or more
            strings). None or empty means the latest block.
        resolve: Optional IPv4 address to connect to instead of DNS.
        config: Loaded configuration.

    Returns:
        Exit code: 0 on success, the error's exit code otherwise.
    """
    try:
        target = resolve_endpoint(endpoint, resolve)
        references = parse_block_references(block_numbers)
        async with GavelClient(target, config) as client:
            proofs = await collect_mmr_proofs(client, references)
    except GavelError as e:
        print_error(e.message)
        return e.exit_code

    print_json([proof.to_dict() for proof in proofs])
    return EXIT_OK
