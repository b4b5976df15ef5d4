"""
Boundary layer data model(s).

These objects are what the domain layer hands over once a guess has been scored or a round has finished.
Both the Service and the API layer work with them, so they only contain plain values
(colors are strings, statuses are StrEnums and timestamps are milliseconds since the epoch).
"""

from dataclasses import dataclass

from src.core.shared_types import RoundStatus, SlotStatus

# Type alias to make the models easier to read
Color = str


@dataclass(frozen=True)
class SlotVerdict:
    """Outcome of comparing one guessed color against the solution."""

    color: Color
    status: SlotStatus


@dataclass(frozen=True)
class GuessRecord:
    """Snapshot of a submitted guess. Created once, never changed."""

    index: int
    colors: tuple[Color, ...]
    results: tuple[SlotVerdict, ...]
    is_correct: bool
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class RoundResult:
    """Payload emitted when a round gets finalized."""

    solution: tuple[Color, ...]
    solved: bool
    skipped: bool
    colors: int
    slots: int
    time_left: int
    guesses: tuple[GuessRecord, ...]
    status: RoundStatus
