"""Exceptions raised by chartalerts."""


class ChartAlertsError(Exception):
    """Base class for chartalerts errors."""


class ConditionConfigError(ChartAlertsError, ValueError):
    """A user supplied override does not fit the condition template."""


class ConfigError(ChartAlertsError):
    """The settings file could not be read or validated."""
