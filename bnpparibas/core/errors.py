"""
Exception hierarchy for the BNP Paribas balance checker.
"""
from typing import Optional


class BankError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(BankError):
    """Missing credentials or an unusable portal table."""


class SessionError(BankError):
    """A network or session fault while talking to the portal."""

    def __init__(self, message: str, url: Optional[str] = None):
        if url:
            message = f"{message} ({url})"
        super().__init__(message)
        self.url = url


class ParseError(BankError):
    """A header or statement line of an export file could not be parsed."""

    def __init__(self, message: str, field: Optional[str] = None, line: Optional[str] = None):
        if field is not None and line is not None:
            message = f"{message}: {field} in line {line!r}"
        elif line is not None:
            message = f"{message}: {line!r}"
        super().__init__(message)
        self.field = field
        self.line = line
