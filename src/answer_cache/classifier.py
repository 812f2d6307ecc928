"""Keyword classifier for questions.

Rules are evaluated in order and the first match wins, so more specific
topics come before the broad ones ("Espírito Santo" before "Deus", "amor de
Deus" before "Deus"). Changing the order changes behavior; the tests pin it.
"""

import re

from answer_cache.entities import Category

RULES: tuple[tuple[re.Pattern[str], Category], ...] = (
    (
        re.compile(r"esp[ií]rito santo|holy spirit|holy ghost|pentecost|dons espirituais"),
        Category.SPIRIT,
    ),
    (
        re.compile(r"\bjesus\b|\bcristo\b|\bmessias\b|\bchrist\b|\bmessiah\b"),
        Category.MESSIAH,
    ),
    (
        re.compile(r"salva[çc][ãa]o|\bsalv[oa]s?\b|reden[çc][ãa]o|\bgra[çc]a\b|salvation|\bsaved\b|\bgrace\b"),
        Category.SALVATION,
    ),
    (
        re.compile(r"ora[çc][ãa]o|\borar\b|\brezar\b|\bprayer\b|\bpray\b"),
        Category.PRAYER,
    ),
    (
        re.compile(r"\bf[ée]\b|\bcrer\b|\bacreditar\b|\bfaith\b|\bbelieve\b"),
        Category.FAITH,
    ),
    (
        re.compile(r"\bamor\b|\bamar\b|\blove\b"),
        Category.LOVE,
    ),
    (
        re.compile(r"\bpecad|\bperd[ãa]o\b|\bsins?\b|\bforgive"),
        Category.SIN,
    ),
    (
        re.compile(
            r"\bc[ée]u\b|\binferno\b|vida eterna|ressurrei[çc][ãa]o|"
            r"\bheaven\b|\bhell\b|eternal life|afterlife|resurrection"
        ),
        Category.AFTERLIFE,
    ),
    (
        re.compile(r"\bigreja\b|comunh[ãa]o|\birm[ãa]os\b|\bchurch\b|fellowship"),
        Category.COMMUNITY,
    ),
    (
        re.compile(r"profec|profet|apocalipse|fim dos tempos|prophe|revelation|end times"),
        Category.PROPHECY,
    ),
    (
        re.compile(r"\bdeus\b|\bsenhor\b|trindade|\bgod\b|\blord\b|trinity"),
        Category.DEITY,
    ),
)


def classify(text: str) -> Category:
    """Return the category of the first rule matching ``text``."""
    lowered = text.lower()
    for pattern, category in RULES:
        if pattern.search(lowered):
            return category
    return Category.GENERAL
