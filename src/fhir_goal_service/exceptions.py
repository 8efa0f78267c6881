"""Exception hierarchy for the FHIR Goal service."""


class GoalServiceError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(GoalServiceError):
    """Settings could not be loaded or failed validation."""
