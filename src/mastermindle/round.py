"""
The Round class is the entrypoint into the domain layer for the service layer.
It holds the hidden solution, the guess being assembled, the countdown, and the history of submitted guesses,
and drives a single round from ACTIVE to one of its four terminal statuses:

- SOLVED: a submitted guess has every slot correct
- OUT_OF_GUESSES: a wrong guess used up the last remaining guess
- TIMED_OUT: the countdown reached zero
- SKIPPED: the player gave up on this code

Whichever fires first wins. Once finished, the round no longer changes.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Self

from src.core.exceptions import InvalidGuessError, RoundStateError
from src.core.models import Color, GuessRecord, RoundResult
from src.core.shared_types import FeedbackMode, RoundStatus, SlotStatus
from src.mastermindle.colors import ColorSpace, clamp_size
from src.mastermindle.feedback import (
    DisclosedFeedback,
    format_feedback,
    parse_mode,
    positions_disclosed,
)
from src.mastermindle.scoring import evaluate, is_solved

logger = logging.getLogger(__name__)

Clock = Callable[[], int]

# Seconds left at which the player gets warned (once per round)
LOW_TIME_WARNING = 30

INCOMPLETE_GUESS = "Please complete your guess!"
ROUND_OVER = "The round is over."
LOW_TIME_NOTICE = f"{LOW_TIME_WARNING} seconds remaining!"
STATUS_NOTICES: dict[RoundStatus, str] = {
    RoundStatus.SOLVED: "You found the solution! Continue to the next trial.",
    RoundStatus.OUT_OF_GUESSES: "Out of guesses! Continue to the next trial.",
    RoundStatus.TIMED_OUT: "Out of time! Continue to the next trial.",
}


def now_ms() -> int:
    return int(time.time() * 1000)


def format_clock(time_left: int, count_up_to: Optional[int] = None) -> str:
    """m:ss as shown above the board. With count_up_to, show the time spent instead of the time left."""
    seconds = count_up_to - time_left if count_up_to is not None else time_left
    return f"{seconds // 60}:{seconds % 60:02d}"


@dataclass(frozen=True)
class SubmitResult:
    """Reply to a submission. Rejected submissions carry a reason and leave the round untouched."""

    accepted: bool
    status: RoundStatus
    record: Optional[GuessRecord] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class TickResult:
    time_left: int
    status: RoundStatus
    low_time_warning: bool = False


@dataclass
class Round:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    color_space: ColorSpace
    solution: tuple[Color, ...]
    feedback_mode: FeedbackMode
    keep_correct: bool
    max_guesses: int
    time_left: int
    guesses_left: int
    current_guess: list[Optional[Color]]
    history: list[GuessRecord] = field(default_factory=list)
    status: RoundStatus = RoundStatus.ACTIVE
    notice: Optional[str] = None
    clock: Clock = now_ms
    guess_start: int = 0
    _warned: bool = field(default=False, init=False, repr=False)

    @classmethod
    def new_round(
        cls,
        slots: int = 4,
        colors: int = 4,
        time_limit: int = 600,
        max_guesses: int = 10,
        feedback: FeedbackMode | int | str = FeedbackMode.FULL_CAPPED,
        keep_correct: bool = True,
        rng: Optional[random.Random] = None,
        clock: Clock = now_ms,
    ) -> Self:
        """Draw a fresh solution and start the round. Slot and color counts out of range get clamped."""
        color_space = ColorSpace.from_count(colors)
        slots = clamp_size(slots, "slots")
        solution = color_space.random_solution(slots, rng)
        round_ = cls(
            color_space=color_space,
            solution=solution,
            feedback_mode=parse_mode(feedback),
            keep_correct=keep_correct,
            max_guesses=max_guesses,
            time_left=max(0, time_limit),
            guesses_left=max_guesses,
            current_guess=[None] * slots,
            clock=clock,
            guess_start=clock(),
        )
        logger.info(
            "new round: slots=%s colors=%s time_limit=%s max_guesses=%s feedback=%s",
            slots,
            len(color_space),
            round_.time_left,
            max_guesses,
            round_.feedback_mode.value,
        )
        return round_

    @property
    def slots(self) -> int:
        return len(self.solution)

    @property
    def round_over(self) -> bool:
        return self.status != RoundStatus.ACTIVE

    @property
    def solved(self) -> bool:
        return self.status == RoundStatus.SOLVED

    # --- EDITING THE GUESS ---
    def place_color(self, slot: int, color: Color) -> None:
        """Put a color in a slot. Placing the color that is already there empties the slot again."""
        if self.round_over:
            return
        self._assert_slot(slot)
        if color not in self.color_space:
            raise InvalidGuessError(
                f"Color {color!r} not available. Pick one from {', '.join(self.color_space.colors)}"
            )
        self.current_guess[slot] = None if self.current_guess[slot] == color else color

    def clear_slot(self, slot: int) -> None:
        if self.round_over:
            return
        self._assert_slot(slot)
        self.current_guess[slot] = None

    def clear_guess(self) -> None:
        if self.round_over:
            return
        self.current_guess = [None] * self.slots

    # --- LIFECYCLE ---
    def submit_guess(self) -> SubmitResult:
        """
        Score the current guess
        -----

        1. reject incomplete guesses (nothing changes)
        2. score and record the guess
        3. solved? --> round over
        4. otherwise use up a guess; none left? --> round over
        5. still going? --> prepare the next guess buffer
        """
        if self.round_over:
            return SubmitResult(accepted=False, status=self.status, reason=ROUND_OVER)
        if any(color is None for color in self.current_guess):
            logger.debug("rejected incomplete guess: %s", self.current_guess)
            return SubmitResult(
                accepted=False, status=self.status, reason=INCOMPLETE_GUESS
            )

        end = self.clock()
        colors = tuple(self.current_guess)
        verdicts = evaluate(self.solution, colors)
        record = GuessRecord(
            index=len(self.history),
            colors=colors,
            results=tuple(verdicts),
            is_correct=is_solved(verdicts),
            start=self.guess_start,
            end=end,
        )
        self.history.append(record)
        self.guess_start = end

        if record.is_correct:
            self._finish(RoundStatus.SOLVED)
            return SubmitResult(accepted=True, status=self.status, record=record)

        self.guesses_left -= 1
        if self.guesses_left <= 0:
            self._finish(RoundStatus.OUT_OF_GUESSES)
            return SubmitResult(accepted=True, status=self.status, record=record)

        self.current_guess = self._next_guess_buffer(record)
        return SubmitResult(accepted=True, status=self.status, record=record)

    def tick(self) -> TickResult:
        """One second passed on the host's clock."""
        if self.round_over:
            return TickResult(time_left=self.time_left, status=self.status)

        self.time_left = max(0, self.time_left - 1)

        warning = False
        if self.time_left == LOW_TIME_WARNING and not self._warned:
            self._warned = True
            warning = True
            self.notice = LOW_TIME_NOTICE
            logger.info("low time warning issued")

        if self.time_left == 0:
            self._finish(RoundStatus.TIMED_OUT)

        return TickResult(
            time_left=self.time_left, status=self.status, low_time_warning=warning
        )

    def skip(self) -> None:
        """The player gives up on this code. Counts as unsolved, whatever was guessed before."""
        if self.round_over:
            return
        self._finish(RoundStatus.SKIPPED)

    def finalize(self) -> RoundResult:
        if not self.round_over:
            raise RoundStateError(
                f"Cannot finalize a round that is still in progress. status: {self.status}"
            )
        return RoundResult(
            solution=self.solution,
            solved=self.solved,
            skipped=self.status == RoundStatus.SKIPPED,
            colors=len(self.color_space),
            slots=self.slots,
            time_left=self.time_left,
            guesses=tuple(self.history),
            status=self.status,
        )

    def reveal_solution(self) -> tuple[Color, ...]:
        if not self.round_over:
            raise RoundStateError("The solution stays hidden until the round is over.")
        return self.solution

    # --- FEEDBACK ---
    def feedback(self, record: GuessRecord) -> DisclosedFeedback:
        return format_feedback(record.results, self.feedback_mode, self.solution)

    def feedback_history(self) -> list[DisclosedFeedback]:
        return [self.feedback(record) for record in self.history]

    # -- PRIVATE HELPERS ---
    def _assert_slot(self, slot: int) -> None:
        if not 0 <= slot < self.slots:
            raise InvalidGuessError(
                f"Slot {slot} does not exist. Slots go from 0 to {self.slots - 1}."
            )

    def _next_guess_buffer(self, record: GuessRecord) -> list[Optional[Color]]:
        """
        Keep the correct slots filled in, but only if the player was told which slots those are.
        Otherwise start from an empty guess.
        """
        if not (self.keep_correct and positions_disclosed(self.feedback_mode)):
            return [None] * self.slots
        return [
            verdict.color if verdict.status == SlotStatus.CORRECT else None
            for verdict in record.results
        ]

    def _finish(self, status: RoundStatus) -> None:
        self.status = status
        self.notice = STATUS_NOTICES.get(status)
        logger.info(
            "round finished: %s after %s guesses with %ss left",
            status,
            len(self.history),
            self.time_left,
        )
