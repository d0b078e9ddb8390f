"""
Task-specific validation of parsed model output.

Verdict and winner strings are mapped onto closed integer enums; those codes
are the only form persisted on-chain. Summaries are validated strictly, the
advisory ``missing_info`` / ``risks`` lists are clamped silently.
"""
import re
from enum import IntEnum
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

from oracle_relayer.config import settings
from oracle_relayer.exceptions import InvalidFieldError, MissingFieldError, SummaryTooLongError

from .json_extractor import parse_json_block


class Verdict(IntEnum):
    APPROVE = 1
    REJECT = 2
    NEEDS_MORE_INFO = 3


class Winner(IntEnum):
    A = 1
    B = 2
    TIE = 3


VERDICT_ALIASES = {
    "approve": Verdict.APPROVE,
    "reject": Verdict.REJECT,
    "needs_more_info": Verdict.NEEDS_MORE_INFO,
}

WINNER_ALIASES = {
    "a": Winner.A,
    "input a": Winner.A,
    "option a": Winner.A,
    "b": Winner.B,
    "input b": Winner.B,
    "option b": Winner.B,
    "tie": Winner.TIE,
    "draw": Winner.TIE,
    "equal": Winner.TIE,
}

_SEPARATORS = re.compile(r"[\s-]+")


class ProposalAssessment(BaseModel):
    """Validated verdict, summary and advisory lists from a proposal review."""
    verdict: Verdict
    summary: str
    missing_info: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


def normalize_verdict(raw: str) -> Verdict:
    """Map e.g. ``"Needs-More Info"`` to ``Verdict.NEEDS_MORE_INFO``."""
    key = _SEPARATORS.sub("_", str(raw).strip().lower())
    try:
        return VERDICT_ALIASES[key]
    except KeyError:
        raise InvalidFieldError(f"Unknown verdict value: {raw}") from None


def normalize_winner(raw: str) -> Winner:
    """Map e.g. ``"Option A"`` to ``Winner.A``."""
    key = str(raw).strip().lower()
    try:
        return WINNER_ALIASES[key]
    except KeyError:
        raise InvalidFieldError(f"Unknown winner value: {raw}") from None


def count_words(text: str) -> int:
    return len(text.split())


def clamp_list(
    items: Any,
    field_name: str,
    max_items: int = settings.MAX_LIST_ITEMS,
    max_item_chars: int = settings.MAX_LIST_ITEM_CHARS,
) -> List[str]:
    """Trim and clamp an advisory list; extra items and characters are dropped."""
    if not isinstance(items, list):
        raise InvalidFieldError(f"{field_name} must be an array")
    cleaned = []
    for item in items:
        if not isinstance(item, str):
            raise InvalidFieldError(f"{field_name} must contain strings")
        cleaned.append(item.strip()[:max_item_chars])
    return cleaned[:max_items]


def _require_text(parsed: dict, field_name: str) -> str:
    value = parsed.get(field_name)
    if value is None or not str(value).strip():
        raise MissingFieldError(f"Missing {field_name} in model response")
    return str(value)


def parse_verdict_response(text: str) -> Verdict:
    """Verdict-only tasks (consensus judges)."""
    parsed = parse_json_block(text)
    return normalize_verdict(_require_text(parsed, "verdict"))


def parse_winner_response(text: str) -> Winner:
    """Winner-only tasks (match referee, pairwise judge)."""
    parsed = parse_json_block(text)
    return normalize_winner(_require_text(parsed, "winner"))


def parse_proposal_assessment(
    text: str,
    max_summary_words: int = settings.MAX_SUMMARY_WORDS,
    max_summary_chars: int = settings.MAX_SUMMARY_CHARS,
) -> ProposalAssessment:
    """
    Validate a proposal review response.

    Args:
        text: Raw model response
        max_summary_words: Word cap for the summary
        max_summary_chars: Character cap for the summary

    Returns:
        ProposalAssessment with clamped advisory lists

    Raises:
        MissingFieldError: verdict or summary missing/empty
        InvalidFieldError: unknown verdict, or lists of the wrong type
        SummaryTooLongError: summary over either cap
    """
    parsed = parse_json_block(text)
    verdict = normalize_verdict(_require_text(parsed, "verdict"))
    summary = _require_text(parsed, "summary").strip()

    word_count = count_words(summary)
    if word_count > max_summary_words or len(summary) > max_summary_chars:
        raise SummaryTooLongError(
            f"Summary too long ({word_count} words, {len(summary)} chars; "
            f"limits {max_summary_words} words, {max_summary_chars} chars)"
        )

    return ProposalAssessment(
        verdict=verdict,
        summary=summary,
        missing_info=clamp_list(parsed.get("missing_info"), "missing_info"),
        risks=clamp_list(parsed.get("risks"), "risks"),
    )
