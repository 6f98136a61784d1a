"""Error taxonomy for ISD retrieval and decoding."""

from typing import Optional


class ISDError(Exception):
    """Base class for all errors raised by this package."""


class InvalidDateRange(ISDError, ValueError):
    """The requested begin date is later than the end date."""


class StationNotAvailable(ISDError, LookupError):
    """No station period covers the requested date range."""


class MalformedField(ISDError, ValueError):
    """A value/quality-code pair does not match the expected wire format."""

    def __init__(self, raw: str, reason: str):
        self.raw = raw
        super().__init__(f"Malformed field {raw!r}: {reason}")


class MalformedComposite(ISDError, ValueError):
    """A composite field (WND, VIS, CIG) has the wrong number of parts."""

    def __init__(self, field: str, raw: str, expected: int, actual: int):
        self.field = field
        self.raw = raw
        super().__init__(
            f"Composite {field} value {raw!r} has {actual} parts, expected {expected}"
        )


class UnknownQualityCode(ISDError, LookupError):
    """A quality code that is not in the quality-code table."""

    def __init__(self, code: str, field: Optional[str] = None):
        self.code = code
        self.field = field
        where = f" in field {field}" if field else ""
        super().__init__(f"Unknown quality code {code!r}{where}")


class UnknownField(ISDError, LookupError):
    """A field name with no entry in the variable metadata table."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown field {name!r}")


class DuplicateObservation(ISDError, ValueError):
    """Two records share the same station and timestamp."""


class MalformedResponse(ISDError, ValueError):
    """The data service returned a body that is not a list of records."""
