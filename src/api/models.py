"""Requests, Response and Settings models"""

from typing import Any, Mapping, Optional, Self

from pydantic import AliasChoices, BaseModel, Field, ValidationInfo, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.models import GuessRecord, RoundResult
from src.core.shared_types import FeedbackMode, RoundStatus, SlotStatus
from src.mastermindle.colors import clamp_size
from src.mastermindle.feedback import DisclosedFeedback

Color = str


def _parse_feedback(value: Any) -> FeedbackMode:
    try:
        return FeedbackMode(value)
    except ValueError:
        raise InvalidRequestError(
            f"Unknown feedback mode: {value!r}. Pick one from {', '.join(m.value for m in FeedbackMode)}"
        )


# --- REQUEST MODELS ---
class NewRoundRequest(BaseModel):
    slots: int = 4
    colors: int = 4
    time_limit: int = 600
    max_guesses: int = 10
    feedback: FeedbackMode = FeedbackMode.FULL_CAPPED
    keep_correct: bool = True

    @field_validator("feedback", mode="before")
    @classmethod
    def validate_feedback(cls, value: Any) -> FeedbackMode:
        return _parse_feedback(value)

    @field_validator(*["slots", "colors"])
    @classmethod
    def clamp(cls, value: int, info: ValidationInfo) -> int:
        return clamp_size(value, info.field_name)

    @field_validator("time_limit")
    @classmethod
    def validate_time_limit(cls, value: int) -> int:
        if value < 0:
            raise InvalidRequestError(f"time_limit cannot be negative, got {value}.")
        return value

    @field_validator("max_guesses")
    @classmethod
    def validate_max_guesses(cls, value: int) -> int:
        if value < 1:
            raise InvalidRequestError(f"At least one guess is needed, got {value}.")
        return value


class AdjustRoundRequest(BaseModel):
    """Between two rounds the player may change the difficulty. Omitted fields stay as they are."""

    slots: Optional[int] = None
    colors: Optional[int] = None

    @field_validator(*["slots", "colors"])
    @classmethod
    def clamp(cls, value: Optional[int], info: ValidationInfo) -> Optional[int]:
        if value is None:
            return value
        return clamp_size(value, info.field_name)


class PlaceColorRequest(BaseModel):
    slot: int
    color: Color


class ClearSlotRequest(BaseModel):
    slot: int


# --- SETTINGS ---
NOT_SET = -1
STARTING_SIZE = 3


class SessionSettings(BaseModel):
    """
    Parameters of a whole session: the shared time budget, what the first round looks like
    and the sizes of the two practice rounds played before it.
    ----
    Hosts pass the time limits as `timelimit` and `timelimit_practice`, the field names work as well.
    A starting size of -1 means "not set" and falls back to 3.
    """

    time_limit: int = Field(600, validation_alias=AliasChoices("timelimit", "time_limit"))
    practice_time_limit: int = Field(
        60, validation_alias=AliasChoices("timelimit_practice", "practice_time_limit")
    )
    guesses: int = 10
    starting_slots: int = STARTING_SIZE
    starting_colors: int = STARTING_SIZE
    practice_slots_1: int = 2
    practice_colors_1: int = 2
    practice_slots_2: int = 5
    practice_colors_2: int = 5
    feedback: FeedbackMode = FeedbackMode.FULL_CAPPED
    keep_correct: bool = True

    @field_validator("feedback", mode="before")
    @classmethod
    def validate_feedback(cls, value: Any) -> FeedbackMode:
        return _parse_feedback(value)

    @field_validator(*["starting_slots", "starting_colors"], mode="before")
    @classmethod
    def default_when_not_set(cls, value: Any) -> Any:
        if str(value).strip() == str(NOT_SET):
            return STARTING_SIZE
        return value

    @field_validator(
        *[
            "starting_slots",
            "starting_colors",
            "practice_slots_1",
            "practice_colors_1",
            "practice_slots_2",
            "practice_colors_2",
        ]
    )
    @classmethod
    def clamp(cls, value: int, info: ValidationInfo) -> int:
        return clamp_size(value, info.field_name)

    @field_validator(*["time_limit", "practice_time_limit"])
    @classmethod
    def validate_time_limit(cls, value: int, info: ValidationInfo) -> int:
        if value < 0:
            raise InvalidRequestError(f"{info.field_name} cannot be negative, got {value}.")
        return value

    @field_validator("guesses")
    @classmethod
    def validate_guesses(cls, value: int) -> int:
        if value < 1:
            raise InvalidRequestError(f"At least one guess is needed, got {value}.")
        return value

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> Self:
        """Build settings from a host's (string) parameters, e.g. URL query parameters. Unknown keys are ignored."""
        return cls.model_validate(dict(params))

    def practice_rounds(self) -> list[NewRoundRequest]:
        """The two practice rounds: their own sizes and time limit, the session's feedback and guesses."""
        return [
            NewRoundRequest(
                slots=slots,
                colors=colors,
                time_limit=self.practice_time_limit,
                max_guesses=self.guesses,
                feedback=self.feedback,
                keep_correct=self.keep_correct,
            )
            for slots, colors in [
                (self.practice_slots_1, self.practice_colors_1),
                (self.practice_slots_2, self.practice_colors_2),
            ]
        ]


# --- RESPONSE MODELS ---
class SlotVerdictResponse(BaseModel):
    color: Color
    status: SlotStatus


class GuessRecordResponse(BaseModel):
    index: int
    colors: list[Color]
    results: list[SlotVerdictResponse]
    is_correct: bool
    start: int
    end: int
    duration: int

    @classmethod
    def from_record(cls, record: GuessRecord) -> Self:
        return cls(
            index=record.index,
            colors=list(record.colors),
            results=[
                SlotVerdictResponse(color=v.color, status=v.status)
                for v in record.results
            ],
            is_correct=record.is_correct,
            start=record.start,
            end=record.end,
            duration=record.duration,
        )


class FeedbackResponse(BaseModel):
    mode: FeedbackMode
    marks: list[str]
    summary: str

    @classmethod
    def from_feedback(cls, feedback: DisclosedFeedback) -> Self:
        return cls(
            mode=feedback.mode,
            marks=list(feedback.marks()),
            summary=feedback.summary(),
        )


class RoundStateResponse(BaseModel):
    """What the host needs to draw the board. The solution only shows up once the round is over."""

    status: RoundStatus
    round_over: bool
    slots: int
    available_colors: list[Color]
    current_guess: list[Optional[Color]]
    time_left: int
    clock: str
    guesses_left: int
    guesses: list[GuessRecordResponse]
    feedback: list[FeedbackResponse]
    solution: Optional[list[Color]]
    notice: Optional[str]


class SubmitGuessResponse(BaseModel):
    accepted: bool
    reason: Optional[str]
    record: Optional[GuessRecordResponse]
    feedback: Optional[FeedbackResponse]
    state: RoundStateResponse


class TickResponse(BaseModel):
    time_left: int
    status: RoundStatus
    low_time_warning: bool
    notice: Optional[str]


class RoundResultResponse(BaseModel):
    solution: list[Color]
    solved: bool
    skipped: bool
    colors: int
    slots: int
    time_left: int
    guesses: list[GuessRecordResponse]

    @classmethod
    def from_result(cls, result: RoundResult) -> Self:
        return cls(
            solution=list(result.solution),
            solved=result.solved,
            skipped=result.skipped,
            colors=result.colors,
            slots=result.slots,
            time_left=result.time_left,
            guesses=[GuessRecordResponse.from_record(g) for g in result.guesses],
        )


class SessionResponse(BaseModel):
    time_budget: int
    slots: int
    colors: int
    rounds_played: int
    round_in_progress: bool
    session_over: bool
