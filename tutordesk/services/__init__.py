"""
Services module containing the countdown controller and its collaborators.
"""

from .event_service import RefreshBus
from .ticker import Ticker
from .delete_executor import DeleteExecutor, DeleteOutcome, HttpDeleteEndpoint
from .sync_service import CrossTabSynchronizer
from .countdown_controller import CountdownController, CountdownView, system_clock
from .toast import CountdownToast

__all__ = [
    "RefreshBus",
    "Ticker",
    "DeleteExecutor",
    "DeleteOutcome",
    "HttpDeleteEndpoint",
    "CrossTabSynchronizer",
    "CountdownController",
    "CountdownView",
    "system_clock",
    "CountdownToast",
]
