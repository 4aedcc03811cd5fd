"""
Episode Oracle Port Interface.

Episode clustering happens outside the selection engine; the engine only
asks which rows share an episode with a given row.
"""
from abc import ABC, abstractmethod
from typing import Optional, Tuple


class EpisodeOraclePort(ABC):
    """Answers episode membership questions for catalog rows."""

    @abstractmethod
    def episode_range_of(self, row_index: int) -> Optional[Tuple[int, int]]:
        """
        Inclusive (first, last) row range of the episode containing a row.

        Every row inside the returned range must report the same range.

        Returns:
            The range, or None if the row belongs to no episode
        """
        raise NotImplementedError
