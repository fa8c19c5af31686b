"""Exceptions raised while reading inputs or running an analysis."""


class ParseError(ValueError):
    """Malformed input data, eg a bad header or non-monotonic timestamps."""

    def __init__(self, message: str, line_number: int | None = None):
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
        self.line_number = line_number


class DriverError(Exception):
    """An analysis run could not complete, eg no households left after filtering."""
    pass
