"""
Scoring a guess against the solution.

Follows the classic peg-counting rules:
1. exact matches are marked correct first (and use up one of that color from the solution)
2. then, going left to right, any remaining slot gets wrong-position if the solution still has an unused peg of that color, otherwise incorrect.

Because the second pass runs left to right, a color guessed more often than it is still needed hands out its hints to the left-most slots.
"""

from collections import Counter
from typing import Optional, Sequence

from src.core.exceptions import InvalidGuessError
from src.core.models import Color, SlotVerdict
from src.core.shared_types import SlotStatus


def evaluate(
    solution: Sequence[Color], guess: Sequence[Optional[Color]]
) -> list[SlotVerdict]:
    """Compare a complete guess with the solution, slot by slot."""
    if len(guess) != len(solution):
        raise InvalidGuessError(
            f"Guess has {len(guess)} slots, the solution has {len(solution)}."
        )
    if any(color is None for color in guess):
        raise InvalidGuessError("Cannot score a guess with unfilled slots.")

    remaining = Counter(solution)
    statuses: list[SlotStatus] = [SlotStatus.INCORRECT] * len(guess)

    # first pass: right color, right position
    for i, (wanted, guessed) in enumerate(zip(solution, guess)):
        if guessed == wanted:
            statuses[i] = SlotStatus.CORRECT
            remaining[guessed] -= 1

    # second pass: right color, wrong position (limited by what is left of that color)
    for i, guessed in enumerate(guess):
        if statuses[i] == SlotStatus.CORRECT:
            continue
        if remaining[guessed] > 0:
            statuses[i] = SlotStatus.WRONG_POSITION
            remaining[guessed] -= 1

    return [SlotVerdict(color, status) for color, status in zip(guess, statuses)]


def is_solved(verdicts: Sequence[SlotVerdict]) -> bool:
    return all(verdict.status == SlotStatus.CORRECT for verdict in verdicts)
