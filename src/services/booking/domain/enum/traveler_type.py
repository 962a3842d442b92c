from enum import Enum


class TravelerType(str, Enum):
    """旅行者区分"""

    ADULT = "adult"
    CHILD = "child"
    INFANT = "infant"
