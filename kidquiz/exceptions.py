"""Custom exceptions for quiz generation and result storage."""


class QuizAppError(Exception):
    """Base exception for the quiz bot."""
    pass


class GenerationError(QuizAppError):
    """Generator call failed or returned unusable data."""
    pass


class StoreError(QuizAppError):
    """Base exception for result store errors."""
    pass


class StoreReadError(StoreError):
    """History fetch failed."""
    pass


class StoreWriteError(StoreError):
    """Insert or delete failed."""
    pass


class ValidationError(QuizAppError):
    """Imported payload is not a list of quiz results."""
    pass
