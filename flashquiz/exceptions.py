"""
Domain errors raised by the quiz codec, session workflow and judge.
Routers translate these into HTTP responses.
"""


class FlashQuizError(Exception):
    """Base class for all flashquiz errors."""
    pass


class EncodingError(FlashQuizError):
    """Raised when a quiz cannot be serialized into a token."""
    pass


class DecodingError(FlashQuizError):
    """Raised when a token cannot be turned back into a quiz."""
    pass


class MalformedTokenError(DecodingError):
    """The token is not valid base64, UTF-8 or JSON."""
    pass


class InvalidQuizError(DecodingError):
    """The decoded JSON does not have the shape of a quiz."""
    pass


class EmptyQuizError(DecodingError):
    """The decoded quiz has no cards."""
    pass


class MissingResultsError(FlashQuizError):
    """A results view was requested for a token without answers."""
    pass


class JudgeUnavailableError(FlashQuizError):
    """The answer judge could not produce a usable judgment."""
    pass


class QuizValidationError(FlashQuizError):
    """User input was rejected (blank answer, no cards, ...)."""
    pass


class DeckImportError(FlashQuizError):
    """A pasted deck code could not be imported."""
    pass
