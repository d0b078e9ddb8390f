"""Extraction and validation of structured model output."""
from .json_extractor import extract_json_block, parse_json_block
from .validators import (
    ProposalAssessment,
    Verdict,
    Winner,
    clamp_list,
    normalize_verdict,
    normalize_winner,
    parse_proposal_assessment,
    parse_verdict_response,
    parse_winner_response,
)

__all__ = [
    "extract_json_block",
    "parse_json_block",
    "ProposalAssessment",
    "Verdict",
    "Winner",
    "clamp_list",
    "normalize_verdict",
    "normalize_winner",
    "parse_proposal_assessment",
    "parse_verdict_response",
    "parse_winner_response",
]
