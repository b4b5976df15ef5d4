"""Exceptions raised by the domain, api and service layers."""


class GameError(Exception):
    """Base class for everything raised on purpose by this package."""


class RoundStateError(GameError):
    """Operation not allowed in the current state of the round (e.g. finalizing a round still in progress)."""


class InvalidGuessError(GameError):
    """A guess (or an edit to the guess buffer) that breaks the rules of the round."""


class InvalidFeedbackModeError(GameError):
    """Unknown feedback mode, or a mode asked for without the information it needs."""


class InvalidRequestError(GameError):
    """Data coming in from the host could not be validated."""


class SessionError(GameError):
    """Session service called out of order (no round running, budget spent, ...)."""
