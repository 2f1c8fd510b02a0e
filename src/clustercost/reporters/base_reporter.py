# src/clustercost/reporters/base_reporter.py
"""
Defines the abstract base class for all snapshot reporters.
"""

from abc import ABC, abstractmethod

from ..models.snapshot import Snapshot


class BaseReporter(ABC):
    """
    Abstract Base Class for all reporters.
    """

    @abstractmethod
    def report(self, snapshot: Snapshot):
        """
        Presents a snapshot in a specific format (e.g., console tables, JSON).
        """
        pass
