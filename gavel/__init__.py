"""gavel: query blockchain nodes for blocks and MMR proofs over WebSockets."""

__version__ = "0.2.0"
