"""
Error Taxonomy
Exceptions raised by stores and services, translated to HTTP responses by the routers
"""


class QuizAppError(Exception):
    """Base exception for all quiz trainer errors"""
    pass


class InvalidInputError(QuizAppError):
    """Raised when request fields are missing or malformed"""
    pass


class MissingInputError(InvalidInputError):
    """Raised when no source content was supplied for generation"""
    pass


class InvalidStateError(QuizAppError):
    """Raised when an operation does not fit the current quiz run state"""
    pass


class NotFoundError(QuizAppError):
    """Raised when a resolvable path references an absent entity"""
    pass


class UpstreamError(QuizAppError):
    """Raised when the text-generation or fetch call fails or returns unusable data"""
    pass


class StorageError(QuizAppError):
    """Raised when a persistence read/write fails"""
    pass


class InvalidFormatError(QuizAppError):
    """Raised when a stored or generated document fails shape validation"""
    pass
