"""Unit tests for src/services/session_service.py"""

import random

import pytest

from src.core.exceptions import RoundStateError, SessionError
from src.core.shared_types import RoundStatus
from src.mastermindle.scoring import evaluate
from src.services.session_service import (
    EXPORT_COLUMNS,
    AdjustRoundRequest,
    ClearSlotRequest,
    NewRoundRequest,
    PlaceColorRequest,
    SessionService,
    SessionSettings,
)


@pytest.fixture
def service(fake_clock) -> SessionService:
    settings = SessionSettings(
        time_limit=100, guesses=3, starting_slots=2, starting_colors=2
    )
    return SessionService(settings, rng=random.Random(7), clock=fake_clock)


def place(service: SessionService, colors: list[str]) -> None:
    """Fill the current guess buffer with the given colors (skipping slots already holding them)."""
    current = service.round_state().current_guess
    for slot, color in enumerate(colors):
        if current[slot] != color:
            service.place_color(PlaceColorRequest(slot=slot, color=color))


def solve(service: SessionService) -> None:
    """Cheat: read the hidden solution straight from the domain object."""
    place(service, list(service.current.solution))
    service.submit_guess()


# --- STARTING ROUNDS ---
def test_session_starts_with_settings(service: SessionService) -> None:
    state = service.session_state()
    assert state.time_budget == 100
    assert (state.slots, state.colors) == (2, 2)
    assert state.rounds_played == 0
    assert not state.round_in_progress
    assert not state.session_over


def test_start_round_uses_session_settings(service: SessionService) -> None:
    state = service.start_round()
    assert state.status == RoundStatus.ACTIVE
    assert state.slots == 2
    assert len(state.available_colors) == 2
    assert state.time_left == 100
    assert state.clock == "1:40"
    assert state.guesses_left == 3
    assert state.current_guess == [None, None]
    assert state.solution is None


def test_cannot_start_two_rounds(service: SessionService) -> None:
    service.start_round()
    with pytest.raises(SessionError):
        service.start_round()


@pytest.mark.parametrize(
    "action",
    [
        lambda s: s.submit_guess(),
        lambda s: s.tick(),
        lambda s: s.skip(),
        lambda s: s.finish_round(),
        lambda s: s.clear_guess(),
        lambda s: s.clear_slot(ClearSlotRequest(slot=0)),
        lambda s: s.round_state(),
    ],
)
def test_actions_need_a_round(service: SessionService, action) -> None:
    with pytest.raises(SessionError):
        action(service)


# --- PLAYING ---
def test_incomplete_submission(service: SessionService) -> None:
    service.start_round()
    response = service.submit_guess()
    assert not response.accepted
    assert response.reason == "Please complete your guess!"
    assert response.record is None
    assert response.feedback is None
    assert response.state.guesses_left == 3


def test_solving_reveals_solution(service: SessionService) -> None:
    service.start_round()
    solution = list(service.current.solution)
    place(service, solution)

    response = service.submit_guess()

    assert response.accepted
    assert response.record.is_correct
    assert response.feedback.marks == ["✓", "✓"]
    assert response.state.round_over
    assert response.state.status == RoundStatus.SOLVED
    assert response.state.solution == solution
    assert response.state.notice.startswith("You found the solution!")


def test_clear_slot_through_service(service: SessionService) -> None:
    service.start_round()
    place(service, ["red", "blue"])
    state = service.clear_slot(ClearSlotRequest(slot=0))
    assert state.current_guess == [None, "blue"]
    assert service.clear_guess().current_guess == [None, None]


def test_tick_reports_low_time(fake_clock) -> None:
    service = SessionService(SessionSettings(time_limit=31), clock=fake_clock)
    service.start_round()
    response = service.tick()
    assert response.time_left == 30
    assert response.low_time_warning
    assert response.notice == "30 seconds remaining!"
    assert service.tick().notice is None


# --- FINISHING ROUNDS / TIME BUDGET ---
def test_time_left_carries_over_to_next_round(service: SessionService) -> None:
    service.start_round()
    for _ in range(15):
        service.tick()
    solve(service)

    result = service.finish_round()

    assert result.solved
    assert result.time_left == 85
    assert service.time_budget == 85
    assert service.start_round().time_left == 85


def test_finish_round_while_active(service: SessionService) -> None:
    service.start_round()
    with pytest.raises(RoundStateError):
        service.finish_round()
    assert service.current is not None


def test_skip_finishes_round(service: SessionService) -> None:
    service.start_round()
    service.tick()
    result = service.skip()
    assert result.skipped
    assert not result.solved
    assert service.time_budget == 99
    assert service.session_state().rounds_played == 1
    assert not service.session_state().round_in_progress


def test_session_over_when_budget_spent(fake_clock) -> None:
    service = SessionService(SessionSettings(time_limit=2), clock=fake_clock)
    service.start_round()
    service.tick()
    assert service.tick().status == RoundStatus.TIMED_OUT
    service.finish_round()

    assert service.session_over
    with pytest.raises(SessionError):
        service.start_round()


def test_standalone_round_does_not_touch_budget(service: SessionService) -> None:
    """e.g. practice rounds before the actual session: own time limit, own size."""
    state = service.start_round(
        NewRoundRequest(slots=5, colors=6, time_limit=60, feedback="5a")
    )
    assert (state.slots, len(state.available_colors), state.time_left) == (5, 6, 60)
    service.tick()
    service.skip()
    assert service.time_budget == 100


def test_practice_rounds_before_session(fake_clock) -> None:
    settings = SessionSettings.from_params(
        {"timelimit": "300", "timelimit_practice": "60", "starting_slots": "-1"}
    )
    service = SessionService(settings, rng=random.Random(3), clock=fake_clock)

    for practice, slots in zip(settings.practice_rounds(), [2, 5]):
        state = service.start_round(practice)
        assert (state.slots, state.time_left) == (slots, 60)
        service.tick()
        service.skip()

    assert service.time_budget == 300
    state = service.start_round()
    assert (state.slots, state.time_left) == (3, 300)


# --- ADJUSTING DIFFICULTY ---
def test_adjust_between_rounds(service: SessionService) -> None:
    state = service.adjust(AdjustRoundRequest(slots=5, colors=20))
    assert (state.slots, state.colors) == (5, 12)
    round_state = service.start_round()
    assert round_state.slots == 5
    assert len(round_state.available_colors) == 12


def test_adjust_keeps_omitted_fields(service: SessionService) -> None:
    state = service.adjust(AdjustRoundRequest(colors=6))
    assert (state.slots, state.colors) == (2, 6)


def test_cannot_adjust_during_round(service: SessionService) -> None:
    service.start_round()
    with pytest.raises(SessionError):
        service.adjust(AdjustRoundRequest(slots=4))


# --- EXPORT ---
def test_export_rows(service: SessionService) -> None:
    # round 0: one wrong guess, then solved
    service.start_round()
    solution = list(service.current.solution)
    wrong = ["blue" if color == "red" else "red" for color in solution]
    place(service, wrong)
    service.submit_guess()
    solve(service)
    service.finish_round()

    # round 1: skipped without guessing
    service.start_round()
    service.skip()

    rows = service.export_rows()

    assert len(rows) == 3
    assert all(tuple(row.keys()) == EXPORT_COLUMNS for row in rows)

    first, second, skipped = rows
    assert first["round_index"] == second["round_index"] == 0
    assert first["solution"] == ",".join(solution)
    assert first["guess_colors"] == ",".join(wrong)
    assert first["result_statuses"] == ",".join(
        verdict.status for verdict in evaluate(solution, wrong)
    )
    assert first["is_correct"] is False
    assert first["guess_duration"] == 1000
    assert second["guess_index"] == 1
    assert second["is_correct"] is True
    assert second["solved"] is True

    assert skipped["round_index"] == 1
    assert skipped["skipped"] is True
    assert skipped["guess_index"] == ""
    assert skipped["result_statuses"] == ""
