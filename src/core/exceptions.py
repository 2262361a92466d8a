"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class RuleTableException(ConfigurationException):
    """Exception for an unusable category rule table."""

    def __init__(
        self,
        source: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.source = source
        super().__init__(f"{source}: {message}", details or {"source": source})
