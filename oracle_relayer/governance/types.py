"""Schemas shared by the Snapshot and Tally adapters.

Both platforms are normalized into ``ProposalDetails`` and ``VotesSummary``
tagged by ``source``; provider-specific shapes never leave the adapters.
"""
import json
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GovernanceSource(str, Enum):
    """Governance platform a proposal was ingested from."""
    SNAPSHOT = "snapshot"
    TALLY = "tally"
    UNKNOWN = "unknown"


Number = Union[int, float]


class ProposalDetails(BaseModel):
    """Proposal metadata in the common relayer shape."""
    source: GovernanceSource = Field(..., description="Platform the proposal came from")
    proposal_id: str = Field(..., description="Platform proposal identifier")
    title: str = Field("", description="Proposal title")
    body: str = Field("", description="Proposal body/description")
    choices: List[str] = Field(default_factory=list, description="Ordered voting choices")
    start: int = Field(0, description="Voting start, unix seconds")
    end: int = Field(0, description="Voting end, unix seconds")
    author: str = Field("", description="Proposer address")
    space: str = Field("", description="Snapshot space or Tally organization slug")

    model_config = ConfigDict(frozen=True)


class VotesSummary(BaseModel):
    """Vote counts for a proposal.

    ``None`` means the platform did not report the value; it is never
    replaced by zero.
    """
    source: GovernanceSource
    proposal_id: str
    total_votes: Optional[int] = Field(None, description="Number of voters")
    scores_total: Optional[Number] = Field(None, description="Sum of voting power")
    scores: Optional[List[Number]] = Field(None, description="Voting power per choice")
    choices: Optional[List[str]] = Field(None, description="Choices matching scores")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_scores_match_choices(self) -> "VotesSummary":
        if self.scores is not None and self.choices is not None and len(self.scores) != len(self.choices):
            raise ValueError(
                f"scores has {len(self.scores)} entries but choices has {len(self.choices)}"
            )
        return self

    def to_prompt_json(self) -> str:
        """Compact JSON used inside model prompts.

        The prompt is hashed, so text stays raw UTF-8 and integral floats are
        written as integers (``100.0`` becomes ``100``).
        """
        data = self.model_dump(mode="json")
        if self.scores_total is not None:
            data["scores_total"] = _integral(self.scores_total)
        if self.scores is not None:
            data["scores"] = [_integral(score) for score in self.scores]
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def _integral(value: Number) -> Number:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
