"""Player statistics: the SQL-backed store and the fire-and-forget result recorder."""

from .recorder import ResultRecorder
from .store import PlayerStatsStore

__all__ = ['PlayerStatsStore', 'ResultRecorder']
