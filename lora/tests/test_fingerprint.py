import pytest
from lora.models.claims import Claim
from lora.utils.fingerprint import normalize_text, fingerprint


class TestNormalizeText:
    """Tests for normalize_text."""

    @pytest.mark.parametrize("text", [
        "  The Moon   is made of CHEESE ",
        "tabs\tand\nnewlines\r\n everywhere",
        "already normalized",
        "",
        "   ",
        "ÜNICODE  Straße",
    ])
    def test_idempotent(self, text):
        once = normalize_text(text)
        assert normalize_text(once) == once

    def test_trims_lowercases_and_collapses(self):
        assert normalize_text("  The   Earth\tIS  round \n") == "the earth is round"


class TestFingerprint:
    """Tests for the exact-cache key."""

    def test_case_and_whitespace_variants_share_a_key(self):
        assert fingerprint("The Earth is round") == fingerprint("  the   EARTH is round ")

    def test_different_text_different_key(self):
        assert fingerprint("The Earth is round") != fingerprint("The Earth is flat")

    def test_is_sha256_hex(self):
        key = fingerprint("anything")
        assert len(key) == 64
        int(key, 16)

    def test_claim_from_text(self):
        claim = Claim.from_text("  Vaccines   cause Autism ")
        assert claim.text == "  Vaccines   cause Autism "
        assert claim.normalized == "vaccines cause autism"
        assert claim.fingerprint == fingerprint("vaccines cause autism")
