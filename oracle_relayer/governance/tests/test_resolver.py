"""Unit tests for proposal URL resolution."""
import pytest

from ..resolver import (
    SnapshotProposalRef,
    TallyProposalRef,
    detect_source,
    parse_snapshot_url,
    parse_tally_url,
)
from ..types import GovernanceSource


class TestDetectSource:
    """Test hostname classification."""

    @pytest.mark.parametrize("url,expected", [
        ("https://snapshot.org/#/aave.eth/proposal/0xabc", GovernanceSource.SNAPSHOT),
        ("https://SNAPSHOT.ORG/#/aave.eth/0xabc", GovernanceSource.SNAPSHOT),
        ("https://www.tally.xyz/gov/uniswap/proposal/42", GovernanceSource.TALLY),
        ("https://example.com/x", GovernanceSource.UNKNOWN),
        ("not a url", GovernanceSource.UNKNOWN),
        ("", GovernanceSource.UNKNOWN),
        ("http://[::1", GovernanceSource.UNKNOWN),
    ])
    def test_detect_source(self, url, expected):
        assert detect_source(url) == expected


class TestParseSnapshotUrl:
    """Test Snapshot fragment parsing."""

    def test_proposal_path(self):
        ref = parse_snapshot_url("https://snapshot.org/#/aave.eth/proposal/0xabc123")
        assert ref == SnapshotProposalRef(space="aave.eth", proposal_id="0xabc123")

    def test_short_path(self):
        ref = parse_snapshot_url("https://snapshot.org/#/ens.eth/0xdef456")
        assert ref == SnapshotProposalRef(space="ens.eth", proposal_id="0xdef456")

    def test_trailing_slash_ignored(self):
        ref = parse_snapshot_url("https://snapshot.org/#/ens.eth/proposal/0x1/")
        assert ref.proposal_id == "0x1"

    @pytest.mark.parametrize("url", [
        "https://snapshot.org/",
        "https://snapshot.org/#/aave.eth",
        "https://snapshot.org/#/aave.eth/proposal",
    ])
    def test_missing_identifier(self, url):
        assert parse_snapshot_url(url) is None


class TestParseTallyUrl:
    """Test Tally path and query parsing."""

    def test_without_governor_id(self):
        ref = parse_tally_url("https://www.tally.xyz/gov/uniswap/proposal/42")
        assert ref == TallyProposalRef(slug="uniswap", onchain_id="42", governor_id=None)

    def test_with_governor_id(self):
        ref = parse_tally_url(
            "https://www.tally.xyz/gov/arbitrum/proposal/1234?govId=eip155:42161:0xf07D"
        )
        assert ref.slug == "arbitrum"
        assert ref.onchain_id == "1234"
        assert ref.governor_id == "eip155:42161:0xf07D"

    @pytest.mark.parametrize("url", [
        "https://www.tally.xyz/",
        "https://www.tally.xyz/gov/uniswap",
        "https://www.tally.xyz/gov/uniswap/proposals/42",
        "https://www.tally.xyz/explore",
    ])
    def test_missing_identifier(self, url):
        assert parse_tally_url(url) is None
