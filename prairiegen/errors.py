"""
Error types for world generation.

Only configuration can fail: the height and colour fields are total
functions over finite coordinates, and an under-filled scatter run is
reported as data rather than raised.
"""

from typing import Iterable, List


class ConfigurationError(ValueError):
    """
    Invalid configuration detected before generation starts.

    Collects every problem found so a caller can report them together.
    """

    def __init__(self, errors: Iterable[str], context: str = "configuration"):
        self.errors: List[str] = list(errors)
        self.context = context
        message = f"Invalid {context}: " + "; ".join(self.errors)
        super().__init__(message)


def raise_if_errors(errors: List[str], context: str = "configuration") -> None:
    """Raise ConfigurationError when the validator found anything."""
    if errors:
        raise ConfigurationError(errors, context)
