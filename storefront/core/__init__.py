# Core modules

from .config import settings, get_settings, Settings
from .state import RequestState, RequestTracker, BatchResult, BatchFailure
from .notifications import Notifier, Notification, format_currency

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "RequestState",
    "RequestTracker",
    "BatchResult",
    "BatchFailure",
    "Notifier",
    "Notification",
    "format_currency",
]
