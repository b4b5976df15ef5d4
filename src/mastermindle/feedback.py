"""
Turn the verdicts of a guess into what the player actually gets to see.

Each FeedbackMode discloses a different amount of information:

| mode | positions shown                                   | counts shown                                        |
|------|---------------------------------------------------|-----------------------------------------------------|
| 1    | none                                              | all correct or not                                  |
| 2    | none                                              | correct, not correct                                |
| 3    | none                                              | correct, incorrect, distinct misplaced colors       |
| 3a   | none                                              | correct, incorrect, misplaced slots                 |
| 4    | correct slots                                     | incorrect, distinct misplaced colors                |
| 4a   | correct slots                                     | incorrect, misplaced slots                          |
| 5    | every slot, misplaced hints capped per color      | none                                                |
| 5a   | every slot, every misplaced verdict shown as such | none                                                |
"""

from collections import Counter
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from src.core.exceptions import InvalidFeedbackModeError
from src.core.models import Color, SlotVerdict
from src.core.shared_types import FeedbackMode, SlotStatus

SlotMarks = tuple[Optional[SlotStatus], ...]

MARKS: dict[SlotStatus, str] = {
    SlotStatus.CORRECT: "✓",
    SlotStatus.INCORRECT: "✗",
    SlotStatus.WRONG_POSITION: "C",
}

POSITIONAL_MODES = frozenset(
    {
        FeedbackMode.POSITIONS_DISTINCT_COLORS,
        FeedbackMode.POSITIONS_MISPLACED_SLOTS,
        FeedbackMode.FULL_CAPPED,
        FeedbackMode.FULL,
    }
)


@dataclass(frozen=True)
class DisclosedFeedback:
    """
    What the player is shown for a single guess.
    Fields a mode does not disclose stay None.
    """

    mode: FeedbackMode
    all_correct: Optional[bool] = None
    correct: Optional[int] = None
    not_correct: Optional[int] = None
    incorrect: Optional[int] = None
    misplaced: Optional[int] = None
    positions: Optional[SlotMarks] = None

    def marks(self) -> tuple[str, ...]:
        """Per-slot symbols: ✓ correct, ✗ incorrect, C misplaced, blank when nothing is disclosed for that slot."""
        if self.positions is None:
            return ()
        return tuple(MARKS[status] if status else " " for status in self.positions)

    def summary(self) -> str:
        """The counts line drawn next to a guess."""
        if self.all_correct is not None:
            return MARKS[SlotStatus.CORRECT] if self.all_correct else MARKS[SlotStatus.INCORRECT]

        parts: list[str] = []
        if self.correct is not None:
            parts.append(f"{MARKS[SlotStatus.CORRECT]} {self.correct}")
        if self.not_correct is not None:
            parts.append(f"{MARKS[SlotStatus.INCORRECT]} {self.not_correct}")
        if self.incorrect is not None:
            parts.append(f"{MARKS[SlotStatus.INCORRECT]} {self.incorrect}")
        if self.misplaced is not None:
            parts.append(f"{MARKS[SlotStatus.WRONG_POSITION]} {self.misplaced}")
        return " ".join(parts)


def parse_mode(mode: FeedbackMode | int | str) -> FeedbackMode:
    try:
        return FeedbackMode(mode)
    except ValueError:
        raise InvalidFeedbackModeError(
            f"Unknown feedback mode: {mode!r}. Pick one from {', '.join(m.value for m in FeedbackMode)}"
        )


def positions_disclosed(mode: FeedbackMode | int | str) -> bool:
    """True for the modes that tell the player which slots are correct."""
    return parse_mode(mode) in POSITIONAL_MODES


def format_feedback(
    verdicts: Sequence[SlotVerdict],
    mode: FeedbackMode | int | str,
    solution: Optional[Sequence[Color]] = None,
) -> DisclosedFeedback:
    """
    Apply the disclosure policy of 'mode' to the verdicts of one guess.
    ----
    NOTE mode 5 caps its misplaced hints by what the solution still needs, so it requires the solution.
    """
    feedback_mode = parse_mode(mode)
    if feedback_mode == FeedbackMode.FULL_CAPPED and solution is None:
        raise InvalidFeedbackModeError(
            "Feedback mode 5 needs the solution to cap the misplaced hints."
        )
    return FEEDBACK_RULES[feedback_mode](verdicts, solution)


# -- COUNTING HELPERS --
def _count(verdicts: Sequence[SlotVerdict], status: SlotStatus) -> int:
    return sum(1 for verdict in verdicts if verdict.status == status)


def _distinct_misplaced_colors(verdicts: Sequence[SlotVerdict]) -> int:
    return len(
        {v.color for v in verdicts if v.status == SlotStatus.WRONG_POSITION}
    )


def _correct_positions(verdicts: Sequence[SlotVerdict]) -> SlotMarks:
    return tuple(
        SlotStatus.CORRECT if v.status == SlotStatus.CORRECT else None
        for v in verdicts
    )


def _capped_positions(
    verdicts: Sequence[SlotVerdict], solution: Sequence[Color]
) -> SlotMarks:
    """
    Wordle-style: don't hand out more misplaced hints for a color than the solution still needs.

    For a misplaced verdict of color C at slot i:
    - still needed: solution slots holding C that were not guessed correctly
    - already hinted: misplaced verdicts of C left of slot i
    Shown as misplaced while already hinted < still needed, as incorrect otherwise.
    """
    still_needed = Counter(
        color
        for color, verdict in zip(solution, verdicts)
        if verdict.status != SlotStatus.CORRECT
    )
    already_hinted: Counter[Color] = Counter()

    positions: list[SlotStatus] = []
    for verdict in verdicts:
        if verdict.status != SlotStatus.WRONG_POSITION:
            positions.append(verdict.status)
            continue
        if already_hinted[verdict.color] < still_needed[verdict.color]:
            positions.append(SlotStatus.WRONG_POSITION)
        else:
            positions.append(SlotStatus.INCORRECT)
        already_hinted[verdict.color] += 1
    return tuple(positions)


# -- ONE RULE PER MODE --
FeedbackRule = Callable[
    [Sequence[SlotVerdict], Optional[Sequence[Color]]], DisclosedFeedback
]


def _binary(
    verdicts: Sequence[SlotVerdict], _solution: Optional[Sequence[Color]]
) -> DisclosedFeedback:
    return DisclosedFeedback(
        FeedbackMode.BINARY,
        all_correct=_count(verdicts, SlotStatus.CORRECT) == len(verdicts),
    )


def _counts(
    verdicts: Sequence[SlotVerdict], _solution: Optional[Sequence[Color]]
) -> DisclosedFeedback:
    correct = _count(verdicts, SlotStatus.CORRECT)
    return DisclosedFeedback(
        FeedbackMode.COUNTS, correct=correct, not_correct=len(verdicts) - correct
    )


def _counts_distinct_colors(
    verdicts: Sequence[SlotVerdict], _solution: Optional[Sequence[Color]]
) -> DisclosedFeedback:
    return DisclosedFeedback(
        FeedbackMode.COUNTS_DISTINCT_COLORS,
        correct=_count(verdicts, SlotStatus.CORRECT),
        incorrect=_count(verdicts, SlotStatus.INCORRECT),
        misplaced=_distinct_misplaced_colors(verdicts),
    )


def _counts_misplaced_slots(
    verdicts: Sequence[SlotVerdict], _solution: Optional[Sequence[Color]]
) -> DisclosedFeedback:
    return DisclosedFeedback(
        FeedbackMode.COUNTS_MISPLACED_SLOTS,
        correct=_count(verdicts, SlotStatus.CORRECT),
        incorrect=_count(verdicts, SlotStatus.INCORRECT),
        misplaced=_count(verdicts, SlotStatus.WRONG_POSITION),
    )


def _positions_distinct_colors(
    verdicts: Sequence[SlotVerdict], _solution: Optional[Sequence[Color]]
) -> DisclosedFeedback:
    return DisclosedFeedback(
        FeedbackMode.POSITIONS_DISTINCT_COLORS,
        incorrect=_count(verdicts, SlotStatus.INCORRECT),
        misplaced=_distinct_misplaced_colors(verdicts),
        positions=_correct_positions(verdicts),
    )


def _positions_misplaced_slots(
    verdicts: Sequence[SlotVerdict], _solution: Optional[Sequence[Color]]
) -> DisclosedFeedback:
    return DisclosedFeedback(
        FeedbackMode.POSITIONS_MISPLACED_SLOTS,
        incorrect=_count(verdicts, SlotStatus.INCORRECT),
        misplaced=_count(verdicts, SlotStatus.WRONG_POSITION),
        positions=_correct_positions(verdicts),
    )


def _full_capped(
    verdicts: Sequence[SlotVerdict], solution: Optional[Sequence[Color]]
) -> DisclosedFeedback:
    return DisclosedFeedback(
        FeedbackMode.FULL_CAPPED, positions=_capped_positions(verdicts, solution)
    )


def _full(
    verdicts: Sequence[SlotVerdict], _solution: Optional[Sequence[Color]]
) -> DisclosedFeedback:
    return DisclosedFeedback(
        FeedbackMode.FULL, positions=tuple(v.status for v in verdicts)
    )


FEEDBACK_RULES: dict[FeedbackMode, FeedbackRule] = {
    FeedbackMode.BINARY: _binary,
    FeedbackMode.COUNTS: _counts,
    FeedbackMode.COUNTS_DISTINCT_COLORS: _counts_distinct_colors,
    FeedbackMode.COUNTS_MISPLACED_SLOTS: _counts_misplaced_slots,
    FeedbackMode.POSITIONS_DISTINCT_COLORS: _positions_distinct_colors,
    FeedbackMode.POSITIONS_MISPLACED_SLOTS: _positions_misplaced_slots,
    FeedbackMode.FULL_CAPPED: _full_capped,
    FeedbackMode.FULL: _full,
}
