"""Custom exceptions for the CHM reader library."""


class CHMError(Exception):
    """Base class for exceptions in this module."""

    pass


class InvalidSourceError(CHMError):
    """Raised when the extracted CHM root is missing or not a directory."""

    pass


class EmptyKeywordError(CHMError, ValueError):
    """Raised when a search or highlight is requested with an empty keyword."""

    pass


class NoSourceError(CHMError):
    """Raised when a session operation needs an opened source and there is none."""

    pass
