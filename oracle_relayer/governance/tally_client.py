"""Tally on-chain governance adapter.

Resolves governors and proposals through the Tally GraphQL API and maps
vote stats into the common relayer shapes. Every request needs an API key.
"""
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from oracle_relayer.config import settings
from oracle_relayer.exceptions import MissingCredentialsError, ProposalNotFoundError, SchemaViolationError
from oracle_relayer.utils.logger import logger

from .graphql_client import GraphQLClient
from .normalize import sum_present, to_int, to_number, to_str
from .types import GovernanceSource, ProposalDetails, VotesSummary

GOVERNOR_QUERY = """
query Governor($input: GovernorInput!) {
  governor(input: $input) {
    id
    slug
    organization { slug name }
  }
}
"""

PROPOSAL_QUERY = """
query Proposal($input: ProposalInput!) {
  proposal(input: $input) {
    id
    onchainId
    metadata { title description }
    proposer { address }
    start { ... on Block { timestamp } ... on BlocklessTimestamp { timestamp } }
    end { ... on Block { timestamp } ... on BlocklessTimestamp { timestamp } }
    voteStats { type votesCount votersCount }
    governor { id slug organization { slug name } }
  }
}
"""

PROPOSAL_VOTES_QUERY = """
query Proposal($input: ProposalInput!) {
  proposal(input: $input) {
    id
    voteStats { type votesCount votersCount }
  }
}
"""


def _timestamp(node: Any) -> int:
    if not isinstance(node, dict):
        return 0
    ts = node.get("timestamp")
    if ts is None:
        ts = node.get("ts")
    return to_int(ts)


def _vote_stats(proposal: Dict[str, Any]) -> List[Dict[str, Any]]:
    stats = proposal.get("voteStats")
    if not isinstance(stats, list):
        return []
    return [s if isinstance(s, dict) else {} for s in stats]


def _stat_choices(stats: List[Dict[str, Any]]) -> List[str]:
    return [to_str(s.get("type")) for s in stats if to_str(s.get("type"))]


class TallyClient(GraphQLClient):
    """Client for the Tally GraphQL API."""

    source_label = "Tally"

    def __init__(
        self,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        **kwargs: Any,
    ):
        self.api_key = api_key if api_key is not None else settings.TALLY_API_KEY
        super().__init__(endpoint or settings.TALLY_GRAPHQL_URL, http_client=http_client, **kwargs)

    def _get_headers(self) -> Dict[str, str]:
        headers = super()._get_headers()
        headers["Api-Key"] = self.api_key
        return headers

    async def query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise MissingCredentialsError("Missing TALLY_API_KEY in env")
        return await super().query(query, variables)

    async def fetch_governor(self, slug: str) -> Dict[str, Any]:
        """Resolve a governor by organization slug."""
        logger.info(f"[Tally] Resolving governor for slug={slug}")
        data = await self.query(GOVERNOR_QUERY, {"input": {"slug": slug}})
        governor = data.get("governor")
        if not governor:
            raise ProposalNotFoundError("Tally governor not found")
        return governor

    async def fetch_proposal_by_onchain(self, governor_id: str, onchain_id: str) -> Dict[str, Any]:
        logger.info(f"[Tally] Fetching proposal governor={governor_id} onchain_id={onchain_id}")
        data = await self.query(
            PROPOSAL_QUERY, {"input": {"onchainId": onchain_id, "governorId": governor_id}}
        )
        proposal = data.get("proposal")
        if not proposal:
            raise ProposalNotFoundError("Tally proposal not found")
        return proposal

    async def fetch_proposal_by_id(self, proposal_id: str) -> Dict[str, Any]:
        logger.info(f"[Tally] Fetching proposal votes id={proposal_id}")
        data = await self.query(PROPOSAL_VOTES_QUERY, {"input": {"id": proposal_id}})
        proposal = data.get("proposal")
        if not proposal:
            raise ProposalNotFoundError("Tally proposal not found")
        return proposal

    async def fetch_proposal(
        self,
        slug: str,
        onchain_id: str,
        governor_id: Optional[str] = None,
    ) -> ProposalDetails:
        """
        Fetch a proposal by governor slug and on-chain id.

        Args:
            slug: Governor/organization slug from the URL
            onchain_id: On-chain proposal id from the URL
            governor_id: Governor id from the ``govId`` query parameter, skips the governor lookup

        Returns:
            ProposalDetails tagged ``tally``
        """
        if not governor_id:
            governor = await self.fetch_governor(slug)
            governor_id = to_str(governor.get("id"))
        proposal = await self.fetch_proposal_by_onchain(governor_id, onchain_id)

        stats = _vote_stats(proposal)
        if stats:
            choices = _stat_choices(stats)
        else:
            logger.warning(
                f"[Tally] Proposal {onchain_id} has no vote stats, assuming choices {settings.DEFAULT_TALLY_CHOICES}"
            )
            choices = list(settings.DEFAULT_TALLY_CHOICES)

        governor_node = proposal.get("governor") or {}
        organization = governor_node.get("organization") or {}
        space = to_str(organization.get("slug")) or to_str(governor_node.get("slug")) or slug
        metadata = proposal.get("metadata") or {}
        proposer = proposal.get("proposer") or {}

        return ProposalDetails(
            source=GovernanceSource.TALLY,
            proposal_id=to_str(proposal.get("id")) or onchain_id,
            title=to_str(metadata.get("title")),
            body=to_str(metadata.get("description")),
            choices=choices,
            start=_timestamp(proposal.get("start")),
            end=_timestamp(proposal.get("end")),
            author=to_str(proposer.get("address")),
            space=space,
        )

    async def fetch_votes_summary(self, proposal_id: str) -> Optional[VotesSummary]:
        """
        Fetch vote stats for a Tally proposal id.

        Returns None when Tally reports no vote stats. Scores are present only
        when every stat carries a numeric count.
        """
        proposal = await self.fetch_proposal_by_id(proposal_id)
        stats = _vote_stats(proposal)
        if not stats:
            return None

        choices = _stat_choices(stats)
        score_values = [to_number(s.get("votesCount")) for s in stats]
        voter_values = [to_number(s.get("votersCount")) for s in stats]
        scores = score_values if all(v is not None for v in score_values) else None
        total_votes = sum_present(voter_values)

        try:
            return VotesSummary(
                source=GovernanceSource.TALLY,
                proposal_id=to_str(proposal.get("id")),
                total_votes=int(total_votes) if total_votes is not None else None,
                scores_total=sum_present(score_values),
                scores=scores,
                choices=choices or None,
            )
        except ValidationError as e:
            raise SchemaViolationError(f"Tally votes summary is inconsistent: {e}") from e
