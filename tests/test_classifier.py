"""
Tests for the keyword classifier.
"""

import pytest

from answer_cache.classifier import RULES, classify
from answer_cache.entities import Category


@pytest.mark.parametrize(
    ("question", "expected"),
    [
        ("O que é fé?", Category.FAITH),
        ("Quem é Deus?", Category.DEITY),
        ("Quem foi Jesus?", Category.MESSIAH),
        ("Como receber o Espírito Santo?", Category.SPIRIT),
        ("O que é a salvação?", Category.SALVATION),
        ("Como devo orar?", Category.PRAYER),
        ("O que a Bíblia diz sobre o amor?", Category.LOVE),
        ("O que é pecado?", Category.SIN),
        ("Como é o céu?", Category.AFTERLIFE),
        ("Por que ir à igreja?", Category.COMMUNITY),
        ("O que diz o Apocalipse?", Category.PROPHECY),
        ("Quem foi Melquisedeque?", Category.GENERAL),
        ("What is faith?", Category.FAITH),
    ],
)
def test_classify(question, expected):
    assert classify(question) == expected


def test_specific_rules_win_over_deity():
    assert classify("O Espírito Santo é Deus?") == Category.SPIRIT
    assert classify("Como é o amor de Deus?") == Category.LOVE
    assert classify("Jesus é o Filho de Deus?") == Category.MESSIAH


def test_first_matching_rule_wins():
    # Mentions both messiah and faith; messiah is checked first.
    assert classify("Ter fé em Cristo") == Category.MESSIAH


def test_word_boundaries():
    assert classify("Gosto de café") == Category.GENERAL


def test_classify_is_case_insensitive():
    assert classify("QUEM É DEUS?") == Category.DEITY


def test_rule_order_is_pinned():
    order = [category for _, category in RULES]
    assert order == [
        Category.SPIRIT,
        Category.MESSIAH,
        Category.SALVATION,
        Category.PRAYER,
        Category.FAITH,
        Category.LOVE,
        Category.SIN,
        Category.AFTERLIFE,
        Category.COMMUNITY,
        Category.PROPHECY,
        Category.DEITY,
    ]
