"""
Type definitions used across layers
"""

from enum import StrEnum


class SlotStatus(StrEnum):
    CORRECT = "correct"
    WRONG_POSITION = "wrong-position"
    INCORRECT = "incorrect"


class RoundStatus(StrEnum):
    ACTIVE = "active"
    SOLVED = "solved"
    OUT_OF_GUESSES = "out of guesses"
    TIMED_OUT = "timed out"
    SKIPPED = "skipped"


class FeedbackMode(StrEnum):
    """
    How much of a guess evaluation gets disclosed to the player. Ordered by increasing information.
    ----
    NOTE hosts tend to pass the plain modes as integers (5) and the variants as strings ("5a"). Both are accepted.
    """

    BINARY = "1"
    COUNTS = "2"
    COUNTS_DISTINCT_COLORS = "3"
    COUNTS_MISPLACED_SLOTS = "3a"
    POSITIONS_DISTINCT_COLORS = "4"
    POSITIONS_MISPLACED_SLOTS = "4a"
    FULL_CAPPED = "5"
    FULL = "5a"

    @classmethod
    def _missing_(cls, value: object) -> "FeedbackMode | None":
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return None
