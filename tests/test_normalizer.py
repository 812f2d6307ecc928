"""
Tests for question normalization and hashing.
"""

import pytest

from answer_cache.normalizer import hash_text, normalize, normalize_question, question_hash


def test_normalize_strips_case_accents_and_punctuation():
    assert normalize("O que é Fé?!") == "o que e fe"


def test_normalize_collapses_whitespace():
    assert normalize("  O   que\té\n fé ") == "o que e fe"


def test_normalize_drops_underscores_and_symbols():
    assert normalize("fé_em   Deus... (João 3:16)") == "feem deus joao 316"


def test_normalize_empty_string():
    assert normalize("") == ""
    assert normalize("?!...") == ""


@pytest.mark.parametrize(
    "question",
    [
        "O que é fé?",
        "  AÇÃO   de graças!!! ",
        "Straße und Ärger",
        "Quem foi Melquisedeque? (Gênesis 14)",
        "ﬁm dos tempos",
    ],
)
def test_normalize_is_idempotent(question):
    once = normalize(question)
    assert normalize(once) == once
    assert hash_text(normalize(once)) == hash_text(once)


def test_variants_share_one_hash():
    variants = ["O que é fé?", "o que e fe", "O QUE É FÉ", "  o que é   fé!! "]
    hashes = {question_hash(v) for v in variants}
    assert len(hashes) == 1


def test_different_questions_have_different_hashes():
    assert question_hash("O que é fé?") != question_hash("O que é graça?")


def test_hash_is_sha256_hex():
    digest = question_hash("O que é fé?")
    assert len(digest) == 64
    assert all(c in "0123456789abcdef" for c in digest)


def test_normalize_question_returns_both_forms():
    result = normalize_question("O que é Fé?")
    assert result.normalized == "o que e fe"
    assert result.question_hash == hash_text("o que e fe")
