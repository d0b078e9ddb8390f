"""Unit tests for prompt builders."""
from oracle_relayer.governance.types import GovernanceSource, VotesSummary

from ..prompts import (
    build_judge_prompt,
    build_match_prompt,
    build_pairwise_judge_prompt,
    build_proposal_prompt,
)


class TestProposalPrompt:

    def test_votes_unavailable(self):
        prompt = build_proposal_prompt("source: snapshot\nbody:\nhello", None)

        assert "Vote summary (if available):\nunavailable\n" in prompt
        assert prompt.endswith("Proposal:\nsource: snapshot\nbody:\nhello")

    def test_votes_embedded_as_compact_json(self):
        summary = VotesSummary(
            source=GovernanceSource.SNAPSHOT,
            proposal_id="0x1",
            total_votes=3,
            scores=[2, 1],
            choices=["For", "Against"],
        )

        prompt = build_proposal_prompt("text", summary)

        assert summary.to_prompt_json() in prompt
        assert '"total_votes":3' in prompt

    def test_votes_keep_raw_unicode(self):
        summary = VotesSummary(
            source=GovernanceSource.SNAPSHOT,
            proposal_id="0x1",
            scores=[100.0, 2.5],
            scores_total=102.5,
            choices=["Oui ✅", "Non"],
        )

        prompt = build_proposal_prompt("text", summary)

        assert '"choices":["Oui ✅","Non"]' in prompt
        assert "\\u2705" not in prompt
        assert '"scores":[100,2.5]' in prompt
        assert '"scores_total":102.5' in prompt

    def test_integral_float_total_written_as_integer(self):
        summary = VotesSummary(source=GovernanceSource.TALLY, proposal_id="9", scores_total=1000.0)

        assert '"scores_total":1000,' in summary.to_prompt_json()

    def test_deterministic(self):
        assert build_proposal_prompt("text", None) == build_proposal_prompt("text", None)


class TestJudgePrompts:

    def test_judge_prompt_defaults_missing_votes(self):
        prompt = build_judge_prompt("text", {"for": 5})

        assert "Votes summary: for=5, against=0, abstain=0" in prompt
        assert prompt.endswith("Proposal:\ntext")

    def test_match_prompt(self):
        prompt = build_match_prompt(
            match_type=2,
            criteria="Highest bid wins",
            input_a="10",
            input_b="12",
            extra="",
            stake_lamports=5000,
        )

        assert "Match type: auction" in prompt
        assert "Stake (lamports): 5000" in prompt
        assert "Input A:\n10\n\nInput B:\n12" in prompt

    def test_match_prompt_unknown_type(self):
        prompt = build_match_prompt(9, "c", "a", "b", "", 0)
        assert "Match type: unknown" in prompt

    def test_pairwise_prompt(self):
        prompt = build_pairwise_judge_prompt("clarity", "first", "second")

        assert "Criteria: clarity" in prompt
        assert prompt.endswith("Input A:\nfirst\n\nInput B:\nsecond")
