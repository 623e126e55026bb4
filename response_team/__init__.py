"""Location/report synchronisation and routing-state core of the response team dashboard."""
from .config import DashboardConfig, load_config_from_env
from .const import VERSION
from .session import DashboardSession, StaticIdentity, TeamIdentity
from .view_model import DashboardData, ViewModel

__version__ = VERSION

__all__ = [
    "DashboardConfig",
    "DashboardData",
    "DashboardSession",
    "StaticIdentity",
    "TeamIdentity",
    "ViewModel",
    "load_config_from_env",
]
