"""
File Store Port Interface.

Abstract interface for the catalog store that counts and fetches files
matching a CompiledPredicate. Implements the Port in Hexagonal Architecture
pattern.

This is a PURE PYTHON module with NO Qt dependencies.
"""
from abc import ABC, abstractmethod
from typing import List, Tuple

from ..domain.compiled_predicate import CompiledPredicate


class FileStorePort(ABC):
    """
    Abstract interface for catalog stores.

    Concrete stores (SQLite catalog, in-memory) implement this interface;
    the selection core depends only on it.

    Example:
        class SqliteFileStore(FileStorePort):
            def count_matching(self, predicate):
                sql = self._builder.build_count(predicate)
                return self._connection.execute(sql).fetchone()[0]
    """

    @abstractmethod
    def distinct_values(self, field_id: str) -> List[str]:
        """
        Distinct values stored for a field, used for value choices
        (folder lists, note autocompletion).

        Args:
            field_id: Column name in the file table

        Returns:
            Sorted list of distinct non-null values
        """
        raise NotImplementedError

    @abstractmethod
    def detection_categories(self) -> List[Tuple[str, str]]:
        """Detection categories as (label, category_id) pairs."""
        raise NotImplementedError

    @abstractmethod
    def classification_categories(self) -> List[Tuple[str, str]]:
        """Classification categories as (label, category_id) pairs."""
        raise NotImplementedError

    @abstractmethod
    def count_matching(self, predicate: CompiledPredicate) -> int:
        """
        Count files matching the predicate.

        May be slow; the caller runs it off the owner thread when a
        background runner is configured.

        Raises:
            Exception: Any failure; reported to the user as an unknown count
        """
        raise NotImplementedError

    @abstractmethod
    def rows_matching(self, predicate: CompiledPredicate) -> List[int]:
        """Row indices of matching files, in the predicate's order."""
        raise NotImplementedError
