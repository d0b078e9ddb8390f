"""Resolve a proposal URL into a governance source and its identifiers.

Supported shapes:
- https://snapshot.org/#/<space>/proposal/<id>
- https://snapshot.org/#/<space>/<id>
- https://www.tally.xyz/gov/<slug>/proposal/<onchainId>[?govId=<governorId>]
"""
from typing import NamedTuple, Optional
from urllib.parse import parse_qs, urlsplit

from .types import GovernanceSource


class SnapshotProposalRef(NamedTuple):
    space: str
    proposal_id: str


class TallyProposalRef(NamedTuple):
    slug: str
    onchain_id: str
    governor_id: Optional[str]


def detect_source(url: str) -> GovernanceSource:
    """Classify a URL by hostname. Never raises."""
    try:
        host = (urlsplit(str(url)).hostname or "").lower()
    except ValueError:
        return GovernanceSource.UNKNOWN
    if "snapshot.org" in host:
        return GovernanceSource.SNAPSHOT
    if "tally.xyz" in host:
        return GovernanceSource.TALLY
    return GovernanceSource.UNKNOWN


def parse_snapshot_url(url: str) -> Optional[SnapshotProposalRef]:
    """Extract the proposal id from a Snapshot URL fragment."""
    try:
        fragment = urlsplit(url).fragment
    except ValueError:
        return None
    parts = [p for p in fragment.split("/") if p]
    if len(parts) >= 2 and parts[1] != "proposal":
        return SnapshotProposalRef(space=parts[0], proposal_id=parts[1])
    if len(parts) >= 3 and parts[1] == "proposal":
        return SnapshotProposalRef(space=parts[0], proposal_id=parts[2])
    return None


def parse_tally_url(url: str) -> Optional[TallyProposalRef]:
    """Extract slug, on-chain id and optional governor id from a Tally URL."""
    try:
        parsed = urlsplit(url)
    except ValueError:
        return None
    parts = [p for p in parsed.path.split("/") if p]
    if "gov" not in parts:
        return None
    gov_idx = parts.index("gov")
    # gov/<slug>/proposal/<onchainId>
    if len(parts) < gov_idx + 4 or parts[gov_idx + 2] != "proposal":
        return None
    governor_ids = parse_qs(parsed.query).get("govId")
    return TallyProposalRef(
        slug=parts[gov_idx + 1],
        onchain_id=parts[gov_idx + 3],
        governor_id=governor_ids[0] if governor_ids else None,
    )
