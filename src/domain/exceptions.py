"""
Domain exceptions - Semantic error types for accounts, keys and data.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Adapters wrap their driver errors in these types.
"""


class PadlockError(Exception):
    """Base class for padlock domain errors."""

    pass


class ValidationError(PadlockError):
    """Caller-supplied input does not match the expected grammar."""

    pass


class AuthenticationFailed(PadlockError):
    """Credentials missing, malformed, or not valid for any account."""

    pass


class MalformedAuthHeader(ValidationError, AuthenticationFailed):
    """Authorization header is not of the form 'ApiKey <email>:<key>'."""

    pass


class NotFoundError(PadlockError):
    """Requested record does not exist."""

    pass


class TokenNotValid(NotFoundError):
    """Activation token is unknown, already used, or unreadable."""

    pass


class DataNotFound(NotFoundError):
    """No data blob has been stored for the account yet."""

    pass


class StorageError(PadlockError):
    """Underlying key-value store failed."""

    pass


class ConcurrentUpdateError(StorageError):
    """Account kept changing underneath a merge until retries ran out."""

    pass


class MailError(PadlockError):
    """Activation email could not be delivered."""

    pass
