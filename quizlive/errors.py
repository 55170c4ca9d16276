"""Errors raised by the quiz core and turned into client-facing messages."""


class QuizError(Exception):
    """Base class: carries the message shown to the client and an HTTP status."""

    message = "Quiz error"
    status_code = 400

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidQuizData(QuizError):
    message = "Invalid quiz data"
    status_code = 400


class QuizNotFound(QuizError):
    message = "Quiz not found"
    status_code = 404


class SessionInactive(QuizError):
    message = "Quiz not active"
    status_code = 409


class InvalidPin(SessionInactive):
    # An unknown PIN is also an inactive session
    message = "Invalid PIN code"
    status_code = 404


class AlreadyStarted(QuizError):
    message = "Quiz has already started"
    status_code = 409


class AlreadyAnswered(QuizError):
    message = "Answer already submitted"
    status_code = 409


class InvalidPlayerName(QuizError):
    message = "Player name is required"
    status_code = 400


class InvalidAnswer(QuizError):
    message = "Invalid answer data"
    status_code = 400


class RegistryFull(QuizError):
    message = "No free PIN codes available"
    status_code = 503
