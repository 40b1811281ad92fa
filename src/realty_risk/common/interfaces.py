"""Common interfaces for the risk engine."""

from abc import ABC, abstractmethod
import numpy as np


class BenchmarkReturnProvider(ABC):
    """Abstract interface for benchmark return sources."""

    @abstractmethod
    def get_returns(self, periods: int) -> np.ndarray:
        """
        Return the trailing benchmark returns.

        Args:
            periods: Number of monthly periods, oldest first

        Returns:
            Array of monthly benchmark returns with exactly `periods` entries
        """
        pass
