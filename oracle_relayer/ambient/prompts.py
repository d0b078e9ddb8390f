"""
Prompt templates for relayer inference tasks.

Prompts are hashed and committed on-chain next to the verdict, so every
builder must be deterministic: same inputs, byte-identical prompt.
"""
from typing import Mapping, Optional

from oracle_relayer.governance.types import VotesSummary

MATCH_TYPES = {
    1: "contest",
    2: "auction",
    3: "simulation",
}


def build_proposal_prompt(proposal_text: str, votes_summary: Optional[VotesSummary]) -> str:
    """Verdict + summary prompt for a stored governance proposal."""
    votes_line = votes_summary.to_prompt_json() if votes_summary is not None else "unavailable"
    return "\n".join([
        'You are an AI governance assistant. Evaluate the proposal under a "trust and verification" mindset.',
        "Return JSON only, with no extra text.",
        "Do not use markdown or code fences.",
        "",
        "Schema:",
        "{",
        '"verdict": "approve" | "reject" | "needs_more_info",',
        '"summary": "one short paragraph",',
        '"missing_info": ["bullet", "bullet", "bullet"],',
        '"risks": ["bullet", "bullet", "bullet"]',
        "}",
        "",
        "Rules:",
        "",
        "Keep summary under 60 words.",
        "",
        'Be conservative. Use "needs_more_info" if any key detail is missing (budget cap, scope, owners, timeline, success metric) or if the data is sparse.',
        'If vote summary is unavailable or indicates low participation, prefer "needs_more_info".',
        "",
        "Do not invent facts that are not in the proposal.",
        "",
        'If the proposal asks for anything unsafe or illegal, verdict must be "reject".',
        "",
        "Vote summary (if available):",
        votes_line,
        "",
        "Proposal:",
        proposal_text,
    ])


def build_judge_prompt(proposal_text: str, votes: Mapping[str, int]) -> str:
    """Verdict prompt for one judge of a consensus panel."""
    return "\n".join([
        "You are an AI governance judge. Evaluate the proposal under a verification-first mindset.",
        "Return JSON only, with no extra text or markdown.",
        "",
        "Schema:",
        "{",
        '"verdict": "approve" | "reject" | "needs_more_info",',
        '"reason": "1-3 sentences"',
        "}",
        "",
        "Rules:",
        'Use "needs_more_info" when key details are missing.',
        "Do not invent facts.",
        "",
        f"Votes summary: for={votes.get('for', 0)}, against={votes.get('against', 0)}, abstain={votes.get('abstain', 0)}",
        "",
        "Proposal:",
        proposal_text,
    ])


def build_match_prompt(
    match_type: int,
    criteria: str,
    input_a: str,
    input_b: str,
    extra: str,
    stake_lamports: int,
) -> str:
    """Referee prompt for a two-sided match."""
    return "\n".join([
        "You are an AI referee. Decide the winner based on the rules and inputs.",
        "Return JSON only, with no extra text or markdown.",
        "",
        "Schema:",
        "{",
        '"winner": "A" | "B" | "Tie",',
        '"reason": "1-3 sentences"',
        "}",
        "",
        "Rules:",
        "Do not invent facts.",
        "If information is insufficient, choose Tie.",
        "",
        f"Match type: {MATCH_TYPES.get(match_type, 'unknown')}",
        f"Stake (lamports): {stake_lamports}",
        "",
        "Criteria:",
        criteria,
        "",
        "Input A:",
        input_a,
        "",
        "Input B:",
        input_b,
        "",
        "Extra context:",
        extra,
    ])


def build_pairwise_judge_prompt(criteria: str, input_a: str, input_b: str) -> str:
    """Strict A/B comparison prompt."""
    return "\n".join([
        "You are a strict judge. Compare Input A vs Input B using the criteria below.",
        "Return ONLY a JSON object with keys: winner (A, B, or Tie) and reason (short).",
        "No extra text.",
        "",
        f"Criteria: {criteria}",
        "",
        "Input A:",
        input_a,
        "",
        "Input B:",
        input_b,
    ])
