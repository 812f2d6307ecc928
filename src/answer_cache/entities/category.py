"""Topical categories for cached questions."""

from enum import Enum


class Category(str, Enum):
    """Closed set of question categories."""

    DEITY = "deity"
    MESSIAH = "messiah"
    SPIRIT = "spirit"
    SALVATION = "salvation"
    PRAYER = "prayer"
    FAITH = "faith"
    LOVE = "love"
    SIN = "sin"
    AFTERLIFE = "afterlife"
    COMMUNITY = "community"
    PROPHECY = "prophecy"
    GENERAL = "general"
