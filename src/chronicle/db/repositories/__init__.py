"""Database repositories for clean data access."""

from .alert import AlertRepository, SummaryRepository
from .analysis import AnalysisHistoryRepository
from .base import BaseRepository
from .tracker import TrackerRepository
from .version import VersionRepository

__all__ = [
    "BaseRepository",
    "AlertRepository",
    "AnalysisHistoryRepository",
    "SummaryRepository",
    "TrackerRepository",
    "VersionRepository",
]
