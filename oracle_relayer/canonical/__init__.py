"""Deterministic, byte-bounded proposal text."""
from .proposal_text import (
    CanonicalProposal,
    build_canonical_proposal_text,
    canonical_byte_budget,
    normalize_body,
    truncate_utf8_by_bytes,
)

__all__ = [
    "CanonicalProposal",
    "build_canonical_proposal_text",
    "canonical_byte_budget",
    "normalize_body",
    "truncate_utf8_by_bytes",
]
