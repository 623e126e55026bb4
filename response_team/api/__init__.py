"""Remote collaborators of the dashboard core."""
from .directions import DirectionsProvider, decode_polyline
from .notifications import RemoteNotificationStore
from .positions import HttpPositionSource, PositionSource, StaticPositionSource, update_location
from .reports import RemoteReportStore

__all__ = [
    "DirectionsProvider",
    "HttpPositionSource",
    "PositionSource",
    "RemoteNotificationStore",
    "RemoteReportStore",
    "StaticPositionSource",
    "decode_polyline",
    "update_location",
]
