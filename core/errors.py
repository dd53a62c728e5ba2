"""
Exceptions raised by the fetch/parse/aggregate layers.

The driver in cli.run_pipeline catches these per pipeline, so one bad
source never takes down the others.
"""


class ChartDataError(Exception):
    """Base class for data problems that fail a chart pipeline."""


class SourceFetchError(ChartDataError):
    """A CSV resource could not be retrieved."""

    def __init__(self, location: str, reason: str):
        super().__init__(f"Failed to fetch {location}: {reason}")
        self.location = location
        self.reason = reason


class MalformedRowError(ChartDataError, ValueError):
    """A data line's field count does not match the header (strict mode)."""

    def __init__(self, line_number: int, expected: int, found: int):
        super().__init__(
            f"Line {line_number}: expected {expected} fields, found {found}"
        )
        self.line_number = line_number
        self.expected = expected
        self.found = found


class NumericParseError(ChartDataError, ValueError):
    """A numeric cell could not be parsed (raise policy)."""


class UnmappedCategoryError(ChartDataError, KeyError):
    """A category label has no normalization rule (strict mode)."""

    def __str__(self):
        return f"No normalization rule for category {self.args[0]!r}"
