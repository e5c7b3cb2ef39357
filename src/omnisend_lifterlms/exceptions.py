"""Omnisend LifterLMS exceptions module."""


class OmnisendError(Exception):
    """Base exception for all Omnisend LifterLMS exceptions."""


class OmnisendInvalidBackendError(OmnisendError):
    """Exception raised when the backend is invalid."""


class OmnisendRequestError(OmnisendError):
    """Exception raised when a call to the Omnisend API fails."""


class MissingIdentityError(OmnisendError):
    """Exception raised when an event cannot be resolved to an email address."""


class MissingSubmissionMarkerError(OmnisendError):
    """Exception raised when a request lacks the proof of form submission."""
