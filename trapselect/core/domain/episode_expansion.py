# -*- coding: utf-8 -*-
"""
Episode Expansion Model.

An episode is a run of files taken close together in time. Episode
membership is written into a Note field as ``<episode>:<position>|<length>``
(e.g. ``12:2|5``). When "show all files in an episode" is on, any file
matching the selection pulls in every other file of its episode.

The clustering itself is done elsewhere; this module only detects the
episode field and unions episode ranges supplied by an oracle.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple

from .exceptions import EpisodeFieldUnavailableError


EPISODE_PATTERN = re.compile(r'^[0-9]+:[0-9]+\|[0-9]+$')

EpisodeRange = Tuple[int, int]


def is_episode_value(value: Any) -> bool:
    """True if value looks like ``<episode>:<position>|<length>``."""
    if value is None:
        return False
    return EPISODE_PATTERN.match(str(value)) is not None


def parse_episode_value(value: str) -> Tuple[int, int, int]:
    """
    Split an episode value into (episode, position, length).

    Raises:
        ValueError: If value is not an episode value
    """
    if not is_episode_value(value):
        raise ValueError(f"Not an episode value: {value!r}")
    episode, rest = value.split(':', 1)
    position, length = rest.split('|', 1)
    return int(episode), int(position), int(length)


def detect_episode_field(row: Optional[Mapping[str, Any]], note_field_ids: Iterable[str]) -> Optional[str]:
    """
    Find the Note field holding episode data by probing one catalog row.

    Args:
        row: A representative row (field id -> value), usually the current file
        note_field_ids: Note fields, in display order

    Returns:
        The first Note field whose value matches the episode pattern, or None
    """
    if not row:
        return None
    for field_id in note_field_ids:
        if is_episode_value(row.get(field_id)):
            return field_id
    return None


@dataclass
class EpisodeExpansion:
    """Episode field of the session and the user's expansion toggle."""
    episode_field_id: Optional[str] = None
    show_all_if_any_match: bool = False

    @property
    def available(self) -> bool:
        return self.episode_field_id is not None

    @property
    def is_active(self) -> bool:
        return self.available and self.show_all_if_any_match

    def detect(self, row: Optional[Mapping[str, Any]], note_field_ids: Iterable[str]) -> Optional[str]:
        """Detect the episode field once; later calls keep the first result."""
        if self.episode_field_id is None:
            self.episode_field_id = detect_episode_field(row, note_field_ids)
        return self.episode_field_id

    def set_show_all(self, enabled: bool) -> None:
        """
        Toggle episode expansion.

        Raises:
            EpisodeFieldUnavailableError: If enabling without an episode
                field. The toggle is left off.
        """
        if enabled and not self.available:
            self.show_all_if_any_match = False
            raise EpisodeFieldUnavailableError(
                "Episode expansion needs a Note field holding episode data"
            )
        self.show_all_if_any_match = bool(enabled)


def expand_matches(matches: Iterable[int],
                   episode_range_of: Callable[[int], Optional[EpisodeRange]]) -> Tuple[int, ...]:
    """
    Union every matched row with the rows of its episode.

    Args:
        matches: Row indices matched by the base selection
        episode_range_of: Oracle returning the inclusive (first, last) row
            range of a row's episode, or None if the row has no episode

    Returns:
        Sorted row indices. Applying the expansion to its own output yields
        the same rows.
    """
    expanded = set()
    for row_index in matches:
        episode = episode_range_of(row_index)
        if episode is None:
            expanded.add(row_index)
            continue
        first, last = episode
        expanded.update(range(first, last + 1))
        expanded.add(row_index)
    return tuple(sorted(expanded))
