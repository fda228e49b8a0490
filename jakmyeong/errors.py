"""Exceptions raised by the naming engine."""


class InvalidInputError(ValueError):
    """Birth data could not be turned into a chart (bad date, hour, minute, gender)."""
