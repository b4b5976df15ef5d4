"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

import random
from typing import Callable, Sequence

import pytest

from src.core.shared_types import FeedbackMode
from src.mastermindle.round import Round


class FakeClock:
    """Every call moves time forward by one second (in milliseconds)."""

    def __init__(self, start: int = 1_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def round_with_solution(
    fake_clock: FakeClock,
) -> Callable[..., Round]:
    """Call the inner function with the solution to hide, plus any setting of Round.new_round to override."""

    def _create_round(
        solution: Sequence[str],
        colors: int = 4,
        time_limit: int = 600,
        max_guesses: int = 10,
        feedback: FeedbackMode | int | str = FeedbackMode.FULL_CAPPED,
        keep_correct: bool = True,
    ) -> Round:
        round_ = Round.new_round(
            slots=len(solution),
            colors=colors,
            time_limit=time_limit,
            max_guesses=max_guesses,
            feedback=feedback,
            keep_correct=keep_correct,
            clock=fake_clock,
        )
        round_.solution = tuple(solution)
        return round_

    return _create_round


@pytest.fixture
def fill_guess() -> Callable[[Round, Sequence[str]], None]:
    """Call the inner function to type in a complete guess, slot by slot."""

    def _fill(round_: Round, colors: Sequence[str]) -> None:
        # placing the color a slot already holds would empty it again
        for slot, color in enumerate(colors):
            if round_.current_guess[slot] != color:
                round_.place_color(slot, color)

    return _fill
