"""Unit tests for source dispatch."""
import asyncio
import json

import httpx
import pytest

from oracle_relayer.exceptions import InvalidProposalUrlError, UnsupportedSourceError

from ..sources import fetch_proposal_from_url, fetch_votes_summary
from ..types import GovernanceSource


def recording_client(payload):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=payload)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), seen


class TestFetchProposalFromUrl:
    """Test URL dispatch to the right adapter."""

    def test_snapshot_url(self):
        http, seen = recording_client({"data": {"proposal": {"id": "0xabc", "title": "T"}}})

        details = asyncio.run(
            fetch_proposal_from_url("https://snapshot.org/#/aave.eth/proposal/0xabc", http_client=http)
        )

        assert details.source == GovernanceSource.SNAPSHOT
        assert details.proposal_id == "0xabc"
        assert json.loads(seen[0].content)["variables"] == {"id": "0xabc"}

    def test_tally_url_uses_gov_id(self):
        proposal = {"id": "55", "metadata": {"title": "T"}, "voteStats": [{"type": "for"}]}
        http, seen = recording_client({"data": {"proposal": proposal}})

        details = asyncio.run(fetch_proposal_from_url(
            "https://www.tally.xyz/gov/ens/proposal/9?govId=eip155:1:0xG",
            http_client=http,
            tally_api_key="secret",
        ))

        assert details.source == GovernanceSource.TALLY
        assert len(seen) == 1
        variables = json.loads(seen[0].content)["variables"]
        assert variables == {"input": {"onchainId": "9", "governorId": "eip155:1:0xG"}}

    def test_unsupported_source(self):
        with pytest.raises(UnsupportedSourceError, match="Unsupported proposal source"):
            asyncio.run(fetch_proposal_from_url("https://example.com/x"))

    def test_invalid_snapshot_url(self):
        with pytest.raises(InvalidProposalUrlError, match="Invalid Snapshot proposal URL"):
            asyncio.run(fetch_proposal_from_url("https://snapshot.org/#/aave.eth"))

    def test_invalid_tally_url(self):
        with pytest.raises(InvalidProposalUrlError, match="Invalid Tally proposal URL"):
            asyncio.run(fetch_proposal_from_url("https://www.tally.xyz/gov/ens"))


class TestFetchVotesSummary:
    """Test vote refresh dispatch."""

    def test_snapshot_by_string_tag(self):
        http, _ = recording_client({"data": {"proposal": {"id": "0xabc", "votes": 3}}})

        summary = asyncio.run(fetch_votes_summary("snapshot", "0xabc", http_client=http))

        assert summary.total_votes == 3

    def test_tally(self):
        proposal = {"id": "55", "voteStats": [{"type": "for", "votesCount": "7", "votersCount": 1}]}
        http, _ = recording_client({"data": {"proposal": proposal}})

        summary = asyncio.run(
            fetch_votes_summary(GovernanceSource.TALLY, "55", http_client=http, tally_api_key="secret")
        )

        assert summary.scores == [7]

    @pytest.mark.parametrize("source", [GovernanceSource.UNKNOWN, "discourse"])
    def test_unknown_source_returns_none(self, source):
        http, seen = recording_client({})

        assert asyncio.run(fetch_votes_summary(source, "1", http_client=http)) is None
        assert seen == []
