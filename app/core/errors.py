# app/core/errors.py


class AttendanceEngineError(Exception):
    """Base class for errors raised by the calendar/classification engine."""


class InvalidDateError(AttendanceEngineError, ValueError):
    """A date or timestamp could not be parsed."""

    def __init__(self, value, reason: str = "expected a YYYY-MM-DD calendar date"):
        self.value = value
        super().__init__(f"Invalid date {value!r}: {reason}")


class InvalidDateRangeError(AttendanceEngineError, ValueError):
    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Invalid date range: start {start} is after end {end}")


class InvalidStatusError(AttendanceEngineError, ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Unknown attendance status {value!r}; expected one of present, absent, pending, late"
        )


class DuplicateRecordError(AttendanceEngineError):
    """Raised in strict mode when a (builder, date) pair appears more than once."""

    def __init__(self, duplicates):
        self.duplicates = sorted(duplicates)
        pairs = ", ".join(f"{builder_id}@{day.isoformat()}" for builder_id, day in self.duplicates)
        super().__init__(f"Duplicate attendance records for: {pairs}")


class NotAClassDayError(AttendanceEngineError):
    def __init__(self, day):
        self.day = day
        super().__init__(f"{day.isoformat()} is not a class day")


class ImportFormatError(AttendanceEngineError, ValueError):
    """An attendance import file is missing required columns or is not text."""


class DuplicateRecordWarning(UserWarning):
    """Same (builder, date) pair supplied twice; per-day counts will double."""
