"""Errors raised while building the dashboard report."""


class ReportError(Exception):
    """Base class for dashboard report errors."""


class InvalidPeriod(ReportError):
    """Raised before any query runs when the requested window or year is unusable:
    - the window starts after it ends
    - only one of an explicit start/end pair is given
    - the trend year is outside the supported range
    """


class QueryFailure(ReportError):
    """Raised when one sub-query of the batch fails; the whole report is abandoned.

    The caller may retry the request. ``sub_query`` names the pipeline that failed.
    """

    def __init__(self, sub_query: str, reason: str = ""):
        self.sub_query = sub_query
        self.reason = reason
        message = f"Dashboard sub-query '{sub_query}' failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
