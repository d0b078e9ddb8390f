"""Ambient inference client and prompt builders."""
from .client import (
    EMPTY_RECEIPT_ROOT,
    AmbientClient,
    AmbientInvocationResult,
    call_ambient,
    merkle_root_bytes,
)
from .prompts import build_judge_prompt, build_match_prompt, build_pairwise_judge_prompt, build_proposal_prompt

__all__ = [
    "EMPTY_RECEIPT_ROOT",
    "AmbientClient",
    "AmbientInvocationResult",
    "call_ambient",
    "merkle_root_bytes",
    "build_proposal_prompt",
    "build_judge_prompt",
    "build_match_prompt",
    "build_pairwise_judge_prompt",
]
