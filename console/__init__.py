"""Console package.

The coordination loop of the monitoring console: configuration loading,
periodic timers, the `MonitoringConsole` state owner and a thread runner
for hosting it behind the Streamlit dashboard.
"""

from .config import ConsoleConfig, load_config
from .coordinator import ConsoleMode, ConsoleSnapshot, MonitoringConsole
from .runner import ConsoleRunner
from .timers import PeriodicTimer

__all__ = [
    "ConsoleConfig",
    "load_config",
    "ConsoleMode",
    "ConsoleSnapshot",
    "MonitoringConsole",
    "ConsoleRunner",
    "PeriodicTimer",
]
