# src/atlascarbon/core/exceptions.py


class AtlasCarbonError(Exception):
    """Base exception for atlascarbon."""

    pass


class ReferenceDataError(AtlasCarbonError):
    """Base exception for reference data related errors."""

    pass


class ReferenceDataMissing(ReferenceDataError):
    """Raised when a reference resource or a required record cannot be found."""

    pass


class MalformedReferenceRow(ReferenceDataError):
    """Raised when a row of a reference resource does not parse."""

    def __init__(self, resource: str, line: int, reason: str):
        self.resource = resource
        self.line = line
        self.reason = reason
        super().__init__(f"{resource}:{line}: {reason}")


class TelemetryFetchFailure(AtlasCarbonError):
    """Raised when the monitoring API returns an error or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class AggregationDomainError(AtlasCarbonError):
    """Raised when a reduction has no input (empty series, missing metric, empty fleet)."""

    pass
