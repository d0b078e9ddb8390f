"""Source dispatch: pick the governance adapter from the resolved source tag."""
from typing import Optional

import httpx

from oracle_relayer.exceptions import InvalidProposalUrlError, UnsupportedSourceError
from oracle_relayer.net.retry_client import SleepFunc
from oracle_relayer.utils.logger import logger

from .resolver import detect_source, parse_snapshot_url, parse_tally_url
from .snapshot_client import SnapshotClient
from .tally_client import TallyClient
from .types import GovernanceSource, ProposalDetails, VotesSummary


async def fetch_proposal_from_url(
    url: str,
    http_client: Optional[httpx.AsyncClient] = None,
    tally_api_key: Optional[str] = None,
    sleep: Optional[SleepFunc] = None,
) -> ProposalDetails:
    """
    Resolve a proposal URL and fetch its details from the matching platform.

    Args:
        url: Snapshot or Tally proposal URL
        http_client: Optional shared AsyncClient
        tally_api_key: Tally API key (default from TALLY_API_KEY)
        sleep: Retry backoff sleep override

    Raises:
        UnsupportedSourceError: URL is not a Snapshot or Tally URL
        InvalidProposalUrlError: URL carries no proposal identifier
    """
    source = detect_source(url)
    logger.info(f"[Sources] Resolved {url} to source={source.value}")

    if source == GovernanceSource.SNAPSHOT:
        ref = parse_snapshot_url(url)
        if ref is None:
            raise InvalidProposalUrlError("Snapshot")
        async with SnapshotClient(http_client=http_client, sleep=sleep) as client:
            return await client.fetch_proposal(ref.proposal_id)

    if source == GovernanceSource.TALLY:
        ref = parse_tally_url(url)
        if ref is None:
            raise InvalidProposalUrlError("Tally")
        async with TallyClient(api_key=tally_api_key, http_client=http_client, sleep=sleep) as client:
            return await client.fetch_proposal(ref.slug, ref.onchain_id, ref.governor_id)

    raise UnsupportedSourceError()


async def fetch_votes_summary(
    source: GovernanceSource,
    proposal_id: str,
    http_client: Optional[httpx.AsyncClient] = None,
    tally_api_key: Optional[str] = None,
    sleep: Optional[SleepFunc] = None,
) -> Optional[VotesSummary]:
    """
    Refresh vote counts for a stored proposal without refetching its metadata.

    Returns None for unknown sources or when the platform reports no votes.
    """
    try:
        source = GovernanceSource(source)
    except ValueError:
        logger.warning(f"[Sources] No votes adapter for source={source!r}")
        return None
    if source == GovernanceSource.SNAPSHOT:
        async with SnapshotClient(http_client=http_client, sleep=sleep) as client:
            return await client.fetch_votes_summary(proposal_id)
    if source == GovernanceSource.TALLY:
        async with TallyClient(api_key=tally_api_key, http_client=http_client, sleep=sleep) as client:
            return await client.fetch_votes_summary(proposal_id)
    return None
