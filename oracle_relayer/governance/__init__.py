"""Governance sources: URL resolution and Snapshot/Tally adapters."""
from .resolver import SnapshotProposalRef, TallyProposalRef, detect_source, parse_snapshot_url, parse_tally_url
from .snapshot_client import SnapshotClient
from .sources import fetch_proposal_from_url, fetch_votes_summary
from .tally_client import TallyClient
from .types import GovernanceSource, ProposalDetails, VotesSummary

__all__ = [
    "GovernanceSource",
    "ProposalDetails",
    "VotesSummary",
    "SnapshotProposalRef",
    "TallyProposalRef",
    "SnapshotClient",
    "TallyClient",
    "detect_source",
    "parse_snapshot_url",
    "parse_tally_url",
    "fetch_proposal_from_url",
    "fetch_votes_summary",
]
