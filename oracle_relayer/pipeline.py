"""
Relayer pipelines.

Each pipeline runs strictly sequentially (resolve, fetch, canonicalize,
invoke, validate) and returns the exact values handed to the external
ledger-submission collaborator. Any error aborts the run.
"""
from typing import Any, Mapping, Optional

import httpx
from pydantic import BaseModel, ConfigDict, field_validator

from oracle_relayer.ambient.client import AmbientClient, AmbientInvocationResult
from oracle_relayer.ambient.prompts import (
    build_judge_prompt,
    build_match_prompt,
    build_pairwise_judge_prompt,
    build_proposal_prompt,
)
from oracle_relayer.canonical.proposal_text import (
    CanonicalProposal,
    build_canonical_proposal_text,
    canonical_byte_budget,
)
from oracle_relayer.config import settings
from oracle_relayer.exceptions import (
    AmbientApiError,
    EmptyModelResponseError,
    ModelOutputError,
    RelayerError,
    TransientProviderError,
)
from oracle_relayer.governance.sources import fetch_proposal_from_url, fetch_votes_summary
from oracle_relayer.governance.types import GovernanceSource, ProposalDetails, VotesSummary
from oracle_relayer.net.retry_client import RetryPolicy, SleepFunc
from oracle_relayer.parsing.validators import (
    ProposalAssessment,
    Verdict,
    Winner,
    parse_proposal_assessment,
    parse_verdict_response,
    parse_winner_response,
)
from oracle_relayer.utils.hashing import sha256_bytes
from oracle_relayer.utils.logger import logger

# Relayer fulfilment makes exactly one inference attempt
NO_RETRY = RetryPolicy(retries=0)


def _check_hash(value: bytes) -> bytes:
    if len(value) != 32:
        raise ValueError(f"expected 32 bytes, got {len(value)}")
    return value


# ==================
# Result Types
# ==================

class IngestedProposal(BaseModel):
    """Proposal ready for ``create_proposal_request`` submission."""
    details: ProposalDetails
    canonical: CanonicalProposal
    canonical_sha256: bytes

    model_config = ConfigDict(frozen=True)

    @property
    def source(self) -> GovernanceSource:
        return self.details.source

    @property
    def proposal_id(self) -> str:
        return self.details.proposal_id

    @property
    def text(self) -> str:
        return self.canonical.text

    @property
    def truncated(self) -> bool:
        return self.canonical.truncated


class ProposalFulfillment(BaseModel):
    """Values for ``fulfill_proposal_request``."""
    verdict_code: int
    summary: str
    summary_hash: bytes
    receipt_root: bytes
    receipt_present: bool
    prompt_hash: bytes
    model_id: str
    assessment: ProposalAssessment

    model_config = ConfigDict(frozen=True)

    @field_validator("summary_hash", "receipt_root", "prompt_hash")
    @classmethod
    def check_hash_lengths(cls, value: bytes) -> bytes:
        return _check_hash(value)


class MatchDecision(BaseModel):
    """Values for match/judge fulfilment."""
    winner_code: int
    prompt_hash: bytes
    response_hash: bytes
    receipt_root: bytes
    receipt_present: bool
    model_id: str

    model_config = ConfigDict(frozen=True)

    @field_validator("prompt_hash", "response_hash", "receipt_root")
    @classmethod
    def check_hash_lengths(cls, value: bytes) -> bytes:
        return _check_hash(value)


class JudgeVerdict(BaseModel):
    """One judge's vote in a consensus panel."""
    verdict_code: int
    receipt_root: bytes
    receipt_present: bool
    prompt_hash: bytes
    model_id: str

    model_config = ConfigDict(frozen=True)


# ==================
# Shared Helpers
# ==================

def _resolve_model_id(model_id: Optional[str]) -> str:
    if model_id is None:
        return settings.get_model_id()
    settings.validate_model_id(model_id)
    return model_id


async def _invoke(
    prompt: str,
    model_id: str,
    api_key: Optional[str],
    http_client: Optional[httpx.AsyncClient],
    sleep: Optional[SleepFunc],
) -> AmbientInvocationResult:
    """Invoke once; 429/500 become TransientProviderError, other API errors propagate."""
    async with AmbientClient(api_key=api_key, http_client=http_client, sleep=sleep) as client:
        try:
            result = await client.invoke(prompt, model_id, retry_policy=NO_RETRY)
        except AmbientApiError as e:
            if e.is_transient:
                logger.error(f"[Pipeline] Ambient API {e.status}")
                raise TransientProviderError(f"Ambient API {e.status}", status_code=e.status) from e
            raise

    if not result.response_text:
        body = result.raw_response_body
        keys = list(body.keys()) if isinstance(body, dict) else type(body).__name__
        logger.error(f"[Pipeline] Could not parse response text. Full response keys: {keys}")
        raise EmptyModelResponseError()

    logger.info(f"[Pipeline] model response: {result.response_text}")
    if not result.receipt_present:
        logger.warning("[Pipeline] receipt missing")
    return result


def _log_rejected_output(task: str, response_text: str, error: ModelOutputError) -> None:
    logger.error(f"[Pipeline] {task} response rejected ({error.message}); raw text: {response_text!r}")


# ==================
# Pipelines
# ==================

async def ingest_proposal(
    url: str,
    max_bytes: Optional[int] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    tally_api_key: Optional[str] = None,
    sleep: Optional[SleepFunc] = None,
) -> IngestedProposal:
    """
    Resolve a proposal URL, fetch it and build its canonical text.

    Args:
        url: Snapshot or Tally proposal URL
        max_bytes: Byte budget (default: min of MAX_PROPOSAL_TEXT_LEN and MAX_INSTRUCTION_BYTES)
        http_client: Optional shared AsyncClient
        tally_api_key: Tally API key override
        sleep: Retry backoff sleep override
    """
    budget = canonical_byte_budget() if max_bytes is None else max_bytes
    details = await fetch_proposal_from_url(
        url, http_client=http_client, tally_api_key=tally_api_key, sleep=sleep
    )
    canonical = build_canonical_proposal_text(details, budget)

    logger.info(
        f"[Pipeline] Ingested source={details.source.value} proposal_id={details.proposal_id} "
        f"bytes={canonical.byte_length}/{budget} body_truncated={str(canonical.truncated).lower()}"
    )
    return IngestedProposal(
        details=details,
        canonical=canonical,
        canonical_sha256=canonical.sha256_bytes(),
    )


async def fulfill_proposal_request(
    proposal_text: str,
    source: Optional[str] = None,
    proposal_id: Optional[str] = None,
    model_id: Optional[str] = None,
    api_key: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    tally_api_key: Optional[str] = None,
    sleep: Optional[SleepFunc] = None,
) -> ProposalFulfillment:
    """
    Review stored proposal text and produce the fulfilment values.

    Vote counts are refreshed when ``source`` and ``proposal_id`` are known;
    a failed refresh is logged and the prompt reports votes as unavailable.

    Raises:
        TransientProviderError: Ambient returned 429/500
        AmbientApiError: Any other non-2xx from Ambient
        ModelOutputError: Response missing, unparsable or invalid
    """
    model_id = _resolve_model_id(model_id)

    votes_summary: Optional[VotesSummary] = None
    if source and proposal_id:
        try:
            votes_summary = await fetch_votes_summary(
                source, proposal_id, http_client=http_client, tally_api_key=tally_api_key, sleep=sleep
            )
        except (RelayerError, httpx.HTTPError) as e:
            logger.warning(f"[Pipeline] Votes summary unavailable for {source}/{proposal_id}: {e}")

    prompt = build_proposal_prompt(proposal_text, votes_summary)
    prompt_hash = sha256_bytes(prompt)
    logger.info(f"[Pipeline] proposal_text: {proposal_text}")

    result = await _invoke(prompt, model_id, api_key, http_client, sleep)

    try:
        assessment = parse_proposal_assessment(result.response_text)
    except ModelOutputError as e:
        _log_rejected_output("proposal", result.response_text, e)
        raise

    logger.info(f"[Pipeline] verdict code: {int(assessment.verdict)}")
    return ProposalFulfillment(
        verdict_code=int(assessment.verdict),
        summary=assessment.summary,
        summary_hash=sha256_bytes(assessment.summary),
        receipt_root=result.receipt_root_bytes,
        receipt_present=result.receipt_present,
        prompt_hash=prompt_hash,
        model_id=model_id,
        assessment=assessment,
    )


async def referee_match(
    match_type: int,
    criteria: str,
    input_a: str,
    input_b: str,
    extra: str = "",
    stake_lamports: int = 0,
    model_id: Optional[str] = None,
    api_key: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    sleep: Optional[SleepFunc] = None,
) -> MatchDecision:
    """Ask the model to referee a match and return the winner code."""
    model_id = _resolve_model_id(model_id)
    prompt = build_match_prompt(
        match_type=match_type,
        criteria=criteria,
        input_a=input_a,
        input_b=input_b,
        extra=extra,
        stake_lamports=stake_lamports,
    )
    return await _decide_winner("match", prompt, model_id, api_key, http_client, sleep)


async def judge_pair(
    criteria: str,
    input_a: str,
    input_b: str,
    model_id: Optional[str] = None,
    api_key: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    sleep: Optional[SleepFunc] = None,
) -> MatchDecision:
    """Compare two inputs against criteria and return the winner code."""
    model_id = _resolve_model_id(model_id)
    prompt = build_pairwise_judge_prompt(criteria, input_a, input_b)
    return await _decide_winner("judge", prompt, model_id, api_key, http_client, sleep)


async def _decide_winner(
    task: str,
    prompt: str,
    model_id: str,
    api_key: Optional[str],
    http_client: Optional[httpx.AsyncClient],
    sleep: Optional[SleepFunc],
) -> MatchDecision:
    result = await _invoke(prompt, model_id, api_key, http_client, sleep)
    try:
        winner: Winner = parse_winner_response(result.response_text)
    except ModelOutputError as e:
        _log_rejected_output(task, result.response_text, e)
        raise

    logger.info(f"[Pipeline] {task} winner code: {int(winner)}")
    return MatchDecision(
        winner_code=int(winner),
        prompt_hash=sha256_bytes(prompt),
        response_hash=sha256_bytes(result.response_text),
        receipt_root=result.receipt_root_bytes,
        receipt_present=result.receipt_present,
        model_id=model_id,
    )


async def judge_proposal(
    proposal_text: str,
    votes: Mapping[str, Any],
    model_id: Optional[str] = None,
    api_key: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    sleep: Optional[SleepFunc] = None,
) -> JudgeVerdict:
    """Collect one consensus judge's verdict on a proposal."""
    model_id = _resolve_model_id(model_id)
    prompt = build_judge_prompt(proposal_text, votes)
    result = await _invoke(prompt, model_id, api_key, http_client, sleep)
    try:
        verdict: Verdict = parse_verdict_response(result.response_text)
    except ModelOutputError as e:
        _log_rejected_output("judge", result.response_text, e)
        raise

    return JudgeVerdict(
        verdict_code=int(verdict),
        receipt_root=result.receipt_root_bytes,
        receipt_present=result.receipt_present,
        prompt_hash=sha256_bytes(prompt),
        model_id=model_id,
    )
