"""Off-chain oracle relayer: governance ingestion, canonical text and model verdicts."""
from .pipeline import (
    IngestedProposal,
    JudgeVerdict,
    MatchDecision,
    ProposalFulfillment,
    fulfill_proposal_request,
    ingest_proposal,
    judge_pair,
    judge_proposal,
    referee_match,
)

__version__ = "0.1.0"

__all__ = [
    "IngestedProposal",
    "JudgeVerdict",
    "MatchDecision",
    "ProposalFulfillment",
    "fulfill_proposal_request",
    "ingest_proposal",
    "judge_pair",
    "judge_proposal",
    "referee_match",
]
