"""Errors that abort a meal resolution request."""


class MealResolutionError(Exception):
    """Base error for meal resolution failures."""


class InvalidInputError(MealResolutionError):
    """Raised when the meal query is missing or blank."""


class ConfigurationError(MealResolutionError):
    """Raised when a required external credential is not configured."""
