# -*- coding: utf-8 -*-
"""
In-Memory File Store.

FileStorePort implementation over a list of FileRecords, evaluating
predicates with the reference evaluator. Suitable for small catalogs,
previews and tests. Episode expansion uses an EpisodeOraclePort; by
default one derived from the episode field values of the records.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..core.domain.compiled_predicate import CompiledPredicate
from ..core.domain.episode_expansion import expand_matches, is_episode_value, parse_episode_value
from ..core.domain.file_record import FileRecord, file_record_from_dict
from ..core.ports.episode_port import EpisodeOraclePort
from ..core.ports.store_port import FileStorePort
from ..core.selection.predicate_evaluator import order_matches, select_indices

logger = logging.getLogger('TrapSelect.Adapters.MemoryStore')


class ListEpisodeOracle(EpisodeOraclePort):
    """
    Episode ranges read from an episode field of consecutive records.

    A value ``<episode>:<position>|<length>`` at row ``i`` places the row
    in the range ``[i - position + 1, i - position + length]``.
    """

    def __init__(self, records: Sequence[FileRecord], episode_field_id: str):
        self._ranges: Dict[int, Tuple[int, int]] = {}
        for index, record in enumerate(records):
            value = record.get(episode_field_id)
            if not is_episode_value(value):
                continue
            _, position, length = parse_episode_value(str(value))
            first = max(0, index - position + 1)
            last = min(len(records) - 1, first + length - 1)
            self._ranges[index] = (first, last)

    def episode_range_of(self, row_index: int) -> Optional[Tuple[int, int]]:
        return self._ranges.get(row_index)


class InMemoryFileStore(FileStorePort):
    """
    Catalog held in memory.

    Args:
        records: FileRecords, or plain dicts accepted by file_record_from_dict
        detection_categories: {category_id: label}
        classification_categories: {category_id: label}
        episode_oracle: Oracle for episode expansion (derived from the
            predicate's episode field when omitted)
    """

    def __init__(
        self,
        records: Iterable[Union[FileRecord, Mapping[str, Any]]],
        detection_categories: Optional[Mapping[str, str]] = None,
        classification_categories: Optional[Mapping[str, str]] = None,
        episode_oracle: Optional[EpisodeOraclePort] = None,
    ):
        self._records: List[FileRecord] = [
            r if isinstance(r, FileRecord) else file_record_from_dict(dict(r)) for r in records
        ]
        self._detection_categories = dict(detection_categories or {})
        self._classification_categories = dict(classification_categories or {})
        self._episode_oracle = episode_oracle
        self.count_calls = 0

    @property
    def records(self) -> List[FileRecord]:
        return self._records

    def distinct_values(self, field_id: str) -> List[str]:
        values = {str(r.get(field_id)) for r in self._records if r.get(field_id) is not None}
        return sorted(values)

    def detection_categories(self) -> List[Tuple[str, str]]:
        return [(label, category_id) for category_id, label in self._detection_categories.items()]

    def classification_categories(self) -> List[Tuple[str, str]]:
        return [(label, category_id) for category_id, label in self._classification_categories.items()]

    def _oracle_for(self, predicate: CompiledPredicate) -> Optional[EpisodeOraclePort]:
        if predicate.episode is None:
            return None
        if self._episode_oracle is not None:
            return self._episode_oracle
        return ListEpisodeOracle(self._records, predicate.episode.episode_field_id)

    def rows_matching(self, predicate: CompiledPredicate) -> List[int]:
        indices = select_indices(predicate, self._records)
        oracle = self._oracle_for(predicate)
        if oracle is not None:
            indices = list(expand_matches(indices, oracle.episode_range_of))
        return order_matches(indices, self._records, predicate.ordering)

    def count_matching(self, predicate: CompiledPredicate) -> int:
        self.count_calls += 1
        count = len(self.rows_matching(predicate))
        logger.debug(f"{count} files match: {predicate.to_display_string()}")
        return count
