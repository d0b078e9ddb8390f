"""
Canonical proposal text for on-chain storage.

Renders ``ProposalDetails`` into a deterministic text blob that fits a fixed
byte budget. The header layout and field order define the hash domain:
changing either changes every downstream hash.

Layout::

    source: <source>
    proposal_id: <id>
    space: <space>
    title: <title>
    author: <author>
    start_unix: <start>
    end_unix: <end>
    choices:
    1. <choice>
    ...
    body_sha256: <hex digest of the full normalized body>
    body_truncated: <true|false>
    body:
    <body, possibly truncated on a character boundary>
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from oracle_relayer.config import settings
from oracle_relayer.exceptions import ProposalTooLongError
from oracle_relayer.governance.types import GovernanceSource, ProposalDetails
from oracle_relayer.utils.hashing import sha256_bytes, sha256_hex
from oracle_relayer.utils.logger import logger

TRUNCATED_FALSE = "body_truncated: false"
TRUNCATED_TRUE = "body_truncated: true"


class CanonicalProposal(BaseModel):
    """Canonical text plus whether the body was cut to fit."""
    text: str
    truncated: bool

    model_config = ConfigDict(frozen=True)

    @property
    def byte_length(self) -> int:
        return utf8_len(self.text)

    def sha256_hex(self) -> str:
        return sha256_hex(self.text)

    def sha256_bytes(self) -> bytes:
        return sha256_bytes(self.text)


def utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


def normalize_body(body: str) -> str:
    """Trim surrounding whitespace, then turn ``\\r\\n`` into ``\\n``; a lone ``\\r`` is kept."""
    return body.strip().replace("\r\n", "\n")


def truncate_utf8_by_bytes(text: str, max_bytes: int) -> str:
    """
    Keep whole characters while their UTF-8 size stays within ``max_bytes``.

    Never splits a multi-byte character, so the result is always valid UTF-8.
    """
    if max_bytes <= 0:
        return ""
    used = 0
    out: List[str] = []
    for ch in text:
        size = utf8_len(ch)
        if used + size > max_bytes:
            break
        out.append(ch)
        used += size
    return "".join(out)


def canonical_byte_budget(
    max_text_len: Optional[int] = None,
    max_instruction_bytes: Optional[int] = None,
) -> int:
    """Byte budget for canonical text: the smaller of the storage and instruction caps."""
    text_cap = settings.MAX_PROPOSAL_TEXT_LEN if max_text_len is None else max_text_len
    instruction_cap = settings.MAX_INSTRUCTION_BYTES if max_instruction_bytes is None else max_instruction_bytes
    if text_cap < 0 or instruction_cap < 0:
        raise ValueError("byte caps must be non-negative")
    return min(text_cap, instruction_cap)


def _header_lines(details: ProposalDetails, body_hash: str) -> List[str]:
    source = details.source.value if isinstance(details.source, GovernanceSource) else str(details.source)
    lines = [
        f"source: {source}",
        f"proposal_id: {details.proposal_id}",
        f"space: {details.space.strip()}",
        f"title: {details.title.strip()}",
        f"author: {details.author.strip()}",
        f"start_unix: {int(details.start)}",
        f"end_unix: {int(details.end)}",
        "choices:",
    ]
    lines.extend(f"{i}. {choice.strip()}" for i, choice in enumerate(details.choices, 1))
    lines.extend([
        f"body_sha256: {body_hash}",
        TRUNCATED_FALSE,
        "body:",
    ])
    return lines


def _render_header(lines: List[str]) -> str:
    return "\n".join(lines) + "\n"


def build_canonical_proposal_text(details: ProposalDetails, max_bytes: int) -> CanonicalProposal:
    """
    Build the canonical text for a proposal within ``max_bytes``.

    Args:
        details: Normalized proposal
        max_bytes: Hard byte budget for the whole text

    Returns:
        CanonicalProposal whose text never exceeds ``max_bytes``

    Raises:
        ProposalTooLongError: If the header alone does not fit
    """
    body = normalize_body(details.body)
    lines = _header_lines(details, sha256_hex(body))

    header = _render_header(lines)
    if utf8_len(header) + utf8_len(body) <= max_bytes:
        return CanonicalProposal(text=header + body, truncated=False)

    lines[-2] = TRUNCATED_TRUE
    header = _render_header(lines)
    remaining = max_bytes - utf8_len(header)
    # An empty body has nothing to cut, so the untruncated header must fit
    if remaining < 0 or not body:
        logger.error(
            f"[Canonical] Header for {details.proposal_id} needs {utf8_len(header)} bytes, budget is {max_bytes}"
        )
        raise ProposalTooLongError()

    truncated_body = truncate_utf8_by_bytes(body, remaining)
    if truncated_body == body:
        # "true" is one byte shorter than "false"; keep the body a strict prefix
        truncated_body = body[:-1]
    logger.info(
        f"[Canonical] Truncated body of {details.proposal_id} from {utf8_len(body)} to {utf8_len(truncated_body)} bytes"
    )
    return CanonicalProposal(text=header + truncated_body, truncated=True)
