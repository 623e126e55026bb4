"""Exception taxonomy for the dashboard core.

Each error is raised by exactly one remote collaborator and caught at the
boundary of the operation that called it.
"""


class DashboardError(Exception):
    """Base class for all dashboard core errors."""


class LocationUnavailable(DashboardError):
    """The position capability was denied, timed out or reported no fix."""


class ReportFetchError(DashboardError):
    """Confirmed reports could not be fetched or parsed."""


class NotificationFetchError(DashboardError):
    """Team notifications could not be fetched or parsed."""


class RoutingUnavailable(DashboardError):
    """The directions service returned no route or failed."""


class LocationSinkError(DashboardError):
    """The team position could not be forwarded upstream."""
