"""Snapshot off-chain governance adapter.

Fetches proposals and vote results from the Snapshot hub GraphQL API and
maps them into the common relayer shapes.
"""
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from oracle_relayer.config import settings
from oracle_relayer.exceptions import ProposalNotFoundError, SchemaViolationError
from oracle_relayer.utils.logger import logger

from .graphql_client import GraphQLClient
from .normalize import number_list, string_list, to_int, to_number, to_str
from .types import GovernanceSource, ProposalDetails, VotesSummary

PROPOSAL_QUERY = """
query Proposal($id: String!) {
  proposal(id: $id) {
    id
    title
    body
    choices
    start
    end
    author
    space { id }
  }
}
"""

PROPOSAL_VOTES_QUERY = """
query ProposalVotes($id: String!) {
  proposal(id: $id) {
    id
    choices
    scores
    scores_total
    votes
  }
}
"""


class SnapshotClient(GraphQLClient):
    """Client for the Snapshot hub GraphQL API."""

    source_label = "Snapshot"

    def __init__(self, endpoint: Optional[str] = None, http_client: Optional[httpx.AsyncClient] = None, **kwargs: Any):
        super().__init__(endpoint or settings.SNAPSHOT_GRAPHQL_URL, http_client=http_client, **kwargs)

    async def fetch_proposal(self, proposal_id: str) -> ProposalDetails:
        """
        Fetch a proposal by its Snapshot id.

        Raises:
            ProposalNotFoundError: If Snapshot has no such proposal
        """
        logger.info(f"[Snapshot] Fetching proposal {proposal_id}")
        data = await self.query(PROPOSAL_QUERY, {"id": proposal_id})
        proposal = data.get("proposal")
        if not proposal:
            raise ProposalNotFoundError("Snapshot proposal not found")
        return self._to_details(proposal)

    async def fetch_votes_summary(self, proposal_id: str) -> Optional[VotesSummary]:
        """Fetch current vote results, or None if the proposal is unknown."""
        logger.info(f"[Snapshot] Fetching votes summary for {proposal_id}")
        data = await self.query(PROPOSAL_VOTES_QUERY, {"id": proposal_id})
        proposal = data.get("proposal")
        if not proposal:
            logger.warning(f"[Snapshot] No proposal {proposal_id} for votes summary")
            return None

        votes = proposal.get("votes")
        scores_total = proposal.get("scores_total")
        try:
            return VotesSummary(
                source=GovernanceSource.SNAPSHOT,
                proposal_id=to_str(proposal.get("id")),
                total_votes=votes if isinstance(votes, int) and not isinstance(votes, bool) else None,
                scores_total=to_number(scores_total) if isinstance(scores_total, (int, float)) else None,
                scores=number_list(proposal.get("scores")),
                choices=string_list(proposal.get("choices")),
            )
        except ValidationError as e:
            raise SchemaViolationError(f"Snapshot votes summary is inconsistent: {e}") from e

    @staticmethod
    def _to_details(proposal: Dict[str, Any]) -> ProposalDetails:
        space = proposal.get("space") or {}
        return ProposalDetails(
            source=GovernanceSource.SNAPSHOT,
            proposal_id=to_str(proposal.get("id")),
            title=to_str(proposal.get("title")),
            body=to_str(proposal.get("body")),
            choices=string_list(proposal.get("choices")) or [],
            start=to_int(proposal.get("start")),
            end=to_int(proposal.get("end")),
            author=to_str(proposal.get("author")),
            space=to_str(space.get("id")) if isinstance(space, dict) else "",
        )
