"""Unit tests for canonical proposal text."""
import hashlib

import pytest
from pydantic import ValidationError

from oracle_relayer.exceptions import ProposalTooLongError
from oracle_relayer.governance.types import GovernanceSource, ProposalDetails

from ..proposal_text import (
    CanonicalProposal,
    build_canonical_proposal_text,
    canonical_byte_budget,
    normalize_body,
    truncate_utf8_by_bytes,
    utf8_len,
)


def make_details(body="Fund the grants program.\r\nBudget: 1M.", **overrides):
    fields = dict(
        source=GovernanceSource.SNAPSHOT,
        proposal_id="0xabc",
        title="  Grants  ",
        body=body,
        choices=[" For", "Against ", "Abstain"],
        start=1700000000,
        end=1700600000,
        author="0xAuthor",
        space="aave.eth",
    )
    fields.update(overrides)
    return ProposalDetails(**fields)


class TestHelpers:

    def test_normalize_body(self):
        assert normalize_body("  a\r\nb\rc\n  ") == "a\nb\rc"

    def test_lone_carriage_return_kept(self):
        assert normalize_body("a\rb") == "a\rb"
        assert normalize_body("\r\na\r\n") == "a"

    def test_truncate_keeps_whole_characters(self):
        text = "aé€😀"  # 1 + 2 + 3 + 4 bytes
        assert truncate_utf8_by_bytes(text, 0) == ""
        assert truncate_utf8_by_bytes(text, 2) == "a"
        assert truncate_utf8_by_bytes(text, 3) == "aé"
        assert truncate_utf8_by_bytes(text, 9) == "aé€"
        assert truncate_utf8_by_bytes(text, 10) == text

    def test_byte_budget(self):
        assert canonical_byte_budget() == 800
        assert canonical_byte_budget(max_text_len=500) == 500
        assert canonical_byte_budget(max_text_len=4096, max_instruction_bytes=1000) == 1000
        with pytest.raises(ValueError):
            canonical_byte_budget(max_text_len=-1)


class TestBuildCanonicalProposalText:

    def test_full_body_when_it_fits(self):
        canonical = build_canonical_proposal_text(make_details(), 800)
        body = "Fund the grants program.\nBudget: 1M."
        body_hash = hashlib.sha256(body.encode("utf-8")).hexdigest()

        assert canonical.truncated is False
        assert canonical.text == (
            "source: snapshot\n"
            "proposal_id: 0xabc\n"
            "space: aave.eth\n"
            "title: Grants\n"
            "author: 0xAuthor\n"
            "start_unix: 1700000000\n"
            "end_unix: 1700600000\n"
            "choices:\n"
            "1. For\n"
            "2. Against\n"
            "3. Abstain\n"
            f"body_sha256: {body_hash}\n"
            "body_truncated: false\n"
            "body:\n"
            + body
        )

    def test_deterministic(self):
        first = build_canonical_proposal_text(make_details(), 800)
        second = build_canonical_proposal_text(make_details(), 800)
        assert first == second
        assert first.sha256_hex() == second.sha256_hex()
        assert first.sha256_bytes() == bytes.fromhex(first.sha256_hex())

    def test_truncation_stays_within_budget(self):
        body = "Ünïcödé 提案 😀 " * 200
        details = make_details(body=body)
        full_hash = hashlib.sha256(normalize_body(body).encode("utf-8")).hexdigest()

        for budget in (400, 401, 402, 403, 517, 800):
            canonical = build_canonical_proposal_text(details, budget)
            assert canonical.truncated is True
            assert canonical.byte_length <= budget
            assert "body_truncated: true\n" in canonical.text
            assert f"body_sha256: {full_hash}\n" in canonical.text
            kept = canonical.text.split("body:\n", 1)[1]
            assert normalize_body(body).startswith(kept)

    def test_zero_budget_header_too_long(self):
        with pytest.raises(ProposalTooLongError, match="too long"):
            build_canonical_proposal_text(make_details(), 0)

    def test_long_title_header_too_long(self):
        with pytest.raises(ProposalTooLongError):
            build_canonical_proposal_text(make_details(title="t" * 900), 800)

    def test_one_byte_over_keeps_strict_prefix(self):
        details = make_details(body="abcdef")
        fits = build_canonical_proposal_text(details, 10_000)
        budget = utf8_len(fits.text) - 1

        canonical = build_canonical_proposal_text(details, budget)

        assert canonical.truncated is True
        assert canonical.byte_length <= budget
        assert canonical.text.endswith("body:\nabcde")

    def test_empty_body_one_byte_over_raises(self):
        details = make_details(body="")
        fits = build_canonical_proposal_text(details, 10_000)
        assert fits.truncated is False

        with pytest.raises(ProposalTooLongError):
            build_canonical_proposal_text(details, utf8_len(fits.text) - 1)

    def test_body_hash_keeps_lone_carriage_return(self):
        canonical = build_canonical_proposal_text(make_details(body="line one\rline two\r\n"), 800)
        body_hash = hashlib.sha256("line one\rline two".encode("utf-8")).hexdigest()

        assert f"body_sha256: {body_hash}\n" in canonical.text
        assert canonical.text.endswith("body:\nline one\rline two")

    def test_exact_fit_is_not_truncated(self):
        details = make_details(body="abcdef")
        fits = build_canonical_proposal_text(details, 10_000)

        canonical = build_canonical_proposal_text(details, utf8_len(fits.text))

        assert canonical == fits


class TestCanonicalProposalModel:

    def test_frozen(self):
        canonical = build_canonical_proposal_text(make_details(), 800)

        assert CanonicalProposal.model_config["frozen"] is True
        with pytest.raises(ValidationError):
            canonical.truncated = True
