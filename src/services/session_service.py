"""Orchestration of communication from the host (UI / experiment timeline) to the round logic (and the reverse direction)."""

import logging
import random
from typing import Any, Optional

from src.api.models import (
    AdjustRoundRequest,
    ClearSlotRequest,
    FeedbackResponse,
    GuessRecordResponse,
    NewRoundRequest,
    PlaceColorRequest,
    RoundResultResponse,
    RoundStateResponse,
    SessionResponse,
    SessionSettings,
    SubmitGuessResponse,
    TickResponse,
)
from src.core.exceptions import SessionError
from src.core.models import RoundResult
from src.mastermindle.round import Clock, Round, format_clock, now_ms

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = (
    "round_index",
    "solution",
    "solved",
    "slots",
    "colors",
    "skipped",
    "time_left",
    "guess_index",
    "guess_start",
    "guess_end",
    "guess_duration",
    "is_correct",
    "guess_colors",
    "result_statuses",
)


class SessionService:
    """
    A session is a loop of rounds sharing one time budget.
    ----
    Every round starts with whatever time the previous round left over. Between rounds, the player can make the game
    easier or harder by changing the number of slots and colors. The session is over once the budget is spent.

    Rounds started with an explicit NewRoundRequest (e.g. practice rounds) run on their own time limit
    and do not touch the budget.
    """

    def __init__(
        self,
        settings: Optional[SessionSettings] = None,
        rng: Optional[random.Random] = None,
        clock: Clock = now_ms,
    ) -> None:
        self.settings = settings or SessionSettings()
        self.rng = rng or random.Random()
        self.clock = clock
        self.time_budget = self.settings.time_limit
        self.slots = self.settings.starting_slots
        self.colors = self.settings.starting_colors
        self.results: list[RoundResult] = []
        self.current: Optional[Round] = None
        self._uses_budget = False

    @property
    def session_over(self) -> bool:
        return self.current is None and self.time_budget <= 0

    # -- HOST ACTIONS --
    def start_round(
        self, request: Optional[NewRoundRequest] = None
    ) -> RoundStateResponse:
        """Start the next round of the session, or a standalone round when a request is supplied."""
        if self.current is not None:
            raise SessionError("A round is already in progress. Finish it first.")

        if request is not None:
            self.current = self._new_round(request)
            self._uses_budget = False
        else:
            if self.time_budget <= 0:
                raise SessionError("No time left in this session.")
            self.current = self._new_round(
                NewRoundRequest(
                    slots=self.slots,
                    colors=self.colors,
                    time_limit=self.time_budget,
                    max_guesses=self.settings.guesses,
                    feedback=self.settings.feedback,
                    keep_correct=self.settings.keep_correct,
                )
            )
            self._uses_budget = True
        return self.round_state()

    def place_color(self, request: PlaceColorRequest) -> RoundStateResponse:
        round_ = self._fetch_round()
        round_.place_color(request.slot, request.color)
        return self.round_state()

    def clear_slot(self, request: ClearSlotRequest) -> RoundStateResponse:
        round_ = self._fetch_round()
        round_.clear_slot(request.slot)
        return self.round_state()

    def clear_guess(self) -> RoundStateResponse:
        round_ = self._fetch_round()
        round_.clear_guess()
        return self.round_state()

    def submit_guess(self) -> SubmitGuessResponse:
        round_ = self._fetch_round()
        result = round_.submit_guess()
        record = result.record
        return SubmitGuessResponse(
            accepted=result.accepted,
            reason=result.reason,
            record=GuessRecordResponse.from_record(record) if record else None,
            feedback=(
                FeedbackResponse.from_feedback(round_.feedback(record))
                if record
                else None
            ),
            state=self.round_state(),
        )

    def tick(self) -> TickResponse:
        round_ = self._fetch_round()
        result = round_.tick()
        return TickResponse(
            time_left=result.time_left,
            status=result.status,
            low_time_warning=result.low_time_warning,
            notice=round_.notice if result.low_time_warning or round_.round_over else None,
        )

    def skip(self) -> RoundResultResponse:
        """Give up on the current code and move on."""
        self._fetch_round().skip()
        return self.finish_round()

    def finish_round(self) -> RoundResultResponse:
        """Close a finished round: keep its result and carry the time it left over into the budget."""
        round_ = self._fetch_round()
        result = round_.finalize()
        self.results.append(result)
        if self._uses_budget:
            self.time_budget = result.time_left
        self.current = None
        logger.info(
            "round %s stored: %s, %ss left in session",
            len(self.results) - 1,
            result.status,
            self.time_budget,
        )
        return RoundResultResponse.from_result(result)

    def adjust(self, request: AdjustRoundRequest) -> SessionResponse:
        """Change the difficulty of the upcoming rounds."""
        if self.current is not None:
            raise SessionError("Cannot change the game while a round is in progress.")
        if request.slots is not None:
            self.slots = request.slots
        if request.colors is not None:
            self.colors = request.colors
        return self.session_state()

    # -- READ-ONLY VIEWS --
    def round_state(self) -> RoundStateResponse:
        round_ = self._fetch_round()
        return RoundStateResponse(
            status=round_.status,
            round_over=round_.round_over,
            slots=round_.slots,
            available_colors=list(round_.color_space.colors),
            current_guess=list(round_.current_guess),
            time_left=round_.time_left,
            clock=format_clock(round_.time_left),
            guesses_left=round_.guesses_left,
            guesses=[GuessRecordResponse.from_record(r) for r in round_.history],
            feedback=[
                FeedbackResponse.from_feedback(f) for f in round_.feedback_history()
            ],
            solution=list(round_.reveal_solution()) if round_.round_over else None,
            notice=round_.notice,
        )

    def session_state(self) -> SessionResponse:
        return SessionResponse(
            time_budget=self.time_budget,
            slots=self.slots,
            colors=self.colors,
            rounds_played=len(self.results),
            round_in_progress=self.current is not None,
            session_over=self.session_over,
        )

    def export_rows(self) -> list[dict[str, Any]]:
        """
        Flatten the finished rounds into one row per guess, ready to be written out as CSV by the host.
        A round without any guess still gets one row (with the guess columns left empty).
        """
        rows: list[dict[str, Any]] = []
        for round_index, result in enumerate(self.results):
            base = {
                "round_index": round_index,
                "solution": ",".join(result.solution),
                "solved": result.solved,
                "slots": result.slots,
                "colors": result.colors,
                "skipped": result.skipped,
                "time_left": result.time_left,
            }
            if not result.guesses:
                rows.append({**base, **{column: "" for column in EXPORT_COLUMNS[7:]}})
                continue
            for guess in result.guesses:
                rows.append(
                    {
                        **base,
                        "guess_index": guess.index,
                        "guess_start": guess.start,
                        "guess_end": guess.end,
                        "guess_duration": guess.duration,
                        "is_correct": guess.is_correct,
                        "guess_colors": ",".join(guess.colors),
                        "result_statuses": ",".join(v.status for v in guess.results),
                    }
                )
        return rows

    # -- Internal helpers --
    def _new_round(self, request: NewRoundRequest) -> Round:
        return Round.new_round(
            slots=request.slots,
            colors=request.colors,
            time_limit=request.time_limit,
            max_guesses=request.max_guesses,
            feedback=request.feedback,
            keep_correct=request.keep_correct,
            rng=self.rng,
            clock=self.clock,
        )

    def _fetch_round(self) -> Round:
        """Get the round in progress and raise error if there is none."""
        if self.current is None:
            raise SessionError("No round in progress. Start one first.")
        return self.current
