"""Domain-specific exceptions"""

from typing import List, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Referenced entity does not exist"""

    pass


class InvalidStateError(DomainException):
    """Transition attempted from a status that forbids it"""

    pass


class ValidationFailedError(DomainException):
    """Entity failed validation; carries the list of reasons"""

    def __init__(self, message: str, reasons: Optional[List[str]] = None):
        super().__init__(message)
        self.reasons = list(reasons or [])


class DuplicateKeyError(DomainException):
    """Uniqueness violation on code, document or number"""

    pass


class IntegrationFailureError(DomainException):
    """Asynchronous integration step could not be completed"""

    pass
