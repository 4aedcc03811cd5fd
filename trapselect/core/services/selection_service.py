# -*- coding: utf-8 -*-
"""
Selection Session Service.

Owns the selection models of one session (field terms, combinator,
recognition criteria, episode expansion), keeps an up-to-date
CompiledPredicate and schedules the debounced recount of matching files.

This is the boundary the selection dialog talks to:

    session = SelectionSession(store, catalog_fields, QtTimerScheduler())
    session.set_term_value('Species', 'deer')
    session.set_term_enabled('Species', True)
    session.current_count()        # CountStatus.PENDING until the timer fires

Every accepted edit recompiles the predicate first and only then swaps it
in; a failing compile leaves the previous predicate in place.

Author: TrapSelect Team
"""

from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Union

from ..domain.compiled_predicate import Combinator, CompiledPredicate
from ..domain.episode_expansion import EpisodeExpansion
from ..domain.exceptions import ConfigurationError, FeatureUnavailableError
from ..domain.field_term import (
    DATABASE_DATETIME_FORMAT,
    ControlKind,
    FieldDefinition,
    FieldTerm,
    SearchOperator,
    build_field_terms,
    format_utc_offset,
)
from ..domain.recognition_criteria import (
    CategoryCatalog,
    CategorySentinel,
    EditOrigin,
    RecognitionCriteria,
    parse_category,
)
from ..domain.selection_state import apply_selection_state, selection_state_to_dict
from ..ports.scheduler_port import CountRunnerPort, SchedulerPort
from ..ports.store_port import FileStorePort
from ..selection.predicate_compiler import compile_predicate, normalize_relative_path
from .count_scheduler import CountScheduler, CountValue
from ...config.config_manager import ConfigManager
from ...infrastructure.logging import get_app_logger

logger = get_app_logger()

IMAGE_QUALITY_FIELD = 'ImageQuality'
DELETE_FLAG_FIELD = 'DeleteFlag'
RELATIVE_PATH_FIELD = 'RelativePath'

IMAGE_QUALITY_OK = 'Ok'
IMAGE_QUALITY_DARK = 'Dark'
IMAGE_QUALITY_VALUES = (IMAGE_QUALITY_OK, IMAGE_QUALITY_DARK)


class QuickSelection(Enum):
    """Shortcut selections offered outside the custom selection dialog."""
    ALL = "all"
    OK = "ok"
    DARK = "dark"
    MARKED_FOR_DELETION = "marked_for_deletion"
    FOLDER = "folder"
    CUSTOM = "custom"


class SelectionSession:
    """
    One custom-selection session over a catalog.

    Args:
        store: Catalog store used for counts, value choices and categories
        field_definitions: Catalog fields, in display order
        scheduler: Timer source for the debounced recount
        runner: Executes counts (inline by default)
        config: Settings; schema defaults when omitted
        sample_row: Representative row used to detect the episode field
        constrain_to_relative_path: Restrict the session to a folder subtree
        default_datetime: Initial value of the DateTime range terms
        default_utc_offset: Initial value of the UtcOffset term (hours)
    """

    def __init__(
        self,
        store: FileStorePort,
        field_definitions: Sequence[FieldDefinition],
        scheduler: SchedulerPort,
        runner: Optional[CountRunnerPort] = None,
        config: Optional[ConfigManager] = None,
        sample_row: Optional[Mapping[str, Any]] = None,
        constrain_to_relative_path: Optional[str] = None,
        default_datetime: Optional[datetime] = None,
        default_utc_offset: Optional[float] = None,
    ):
        config = config or ConfigManager(auto_load=False)
        self._store = store
        self._separator = config.get('SELECTION', 'PATH_SEPARATOR', default='\\')

        self.terms: List[FieldTerm] = build_field_terms(
            field_definitions, default_datetime, default_utc_offset)
        self._terms_by_key: Dict[str, FieldTerm] = {t.key: t for t in self.terms}
        if config.get('SELECTION', 'SUBTREE_FOLDER_MATCHING', default=True):
            for term in self._terms_of_kind(ControlKind.RELATIVE_PATH):
                term.set_subtree_mode(True)

        self.combinator = Combinator.from_string(config.get('SELECTION', 'DEFAULT_COMBINATOR', default='AND'))
        self.categories = CategoryCatalog.from_pairs(
            store.detection_categories(), store.classification_categories())
        default_range = (
            config.get('RECOGNITION', 'DEFAULT_CONFIDENCE_LOW', default=0.8),
            config.get('RECOGNITION', 'DEFAULT_CONFIDENCE_HIGH', default=1.0),
        )
        self.recognition = RecognitionCriteria(
            confidence_low=default_range[0],
            confidence_high=default_range[1],
            detection_floor=config.get('RECOGNITION', 'MINIMUM_DETECTION_CONFIDENCE', default=0.01),
            default_range=default_range,
        )
        self.episode = EpisodeExpansion()
        self.episode.detect(sample_row, [t.field_id for t in self._terms_of_kind(ControlKind.NOTE)])

        self._constrained_path: Optional[str] = None
        if constrain_to_relative_path is not None:
            self.constrain_to_relative_path(constrain_to_relative_path)

        self._predicate = self._compile()
        self.count_scheduler = CountScheduler(
            scheduler,
            store.count_matching,
            snapshot_fn=self.compiled_predicate,
            runner=runner,
            delay_ms=config.get('COUNTING', 'DEBOUNCE_MS', default=500),
        )
        logger.info(
            f"Selection session started: {len(self.terms)} terms, "
            f"episode field={self.episode.episode_field_id}"
        )

    # ------------------------------------------------------------------
    # UI boundary
    # ------------------------------------------------------------------

    def compiled_predicate(self) -> CompiledPredicate:
        """The predicate for the current settings."""
        return self._predicate

    def current_count(self) -> CountValue:
        """Matching files: an int, CountStatus.PENDING or CountStatus.UNKNOWN."""
        return self.count_scheduler.current_count()

    def on_input_changed(self) -> None:
        """
        Recompile after an accepted edit and schedule a recount.

        Ignored while the session is loading saved state.

        Raises:
            ConfigurationError: If the settings cannot be compiled. The
                previous predicate stays in effect.
        """
        if self.count_scheduler.is_suppressed:
            return
        try:
            predicate = self._compile()
        except ConfigurationError as e:
            logger.error(f"Selection could not be compiled, keeping previous one: {e}")
            raise
        self._predicate = predicate
        self.count_scheduler.on_input_changed()

    def matching_rows(self) -> List[int]:
        """Row indices selected by the current predicate."""
        return self._store.rows_matching(self._predicate)

    def _compile(self) -> CompiledPredicate:
        return compile_predicate(self.terms, self.combinator, self.recognition,
                                 self.episode, self.categories)

    # ------------------------------------------------------------------
    # Field terms
    # ------------------------------------------------------------------

    def term(self, key: str) -> FieldTerm:
        """
        Look up a term by key ('DateTime:start' / 'DateTime:end' for the range).

        Raises:
            KeyError: If the catalog has no such term
        """
        return self._terms_by_key[key]

    def _terms_of_kind(self, kind: ControlKind) -> List[FieldTerm]:
        return [t for t in self.terms if t.control_kind is kind]

    def _first_term(self, field_id: str) -> Optional[FieldTerm]:
        for term in self.terms:
            if term.field_id == field_id:
                return term
        return None

    def set_term_value(self, key: str, text: Any) -> bool:
        """
        Apply a typed value to a term.

        Returns:
            True if accepted; False if the input was silently ignored

        Raises:
            ValueInputError: If the input was refused (previous value kept)
        """
        term = self.term(key)
        if term.locked:
            return False
        if not term.set_value_from_input(text):
            return False
        self.on_input_changed()
        return True

    def set_term_operator(self, key: str, operator: Union[SearchOperator, str]) -> None:
        """
        Raises:
            OperatorNotAllowedError: If the operator is illegal for the term
        """
        self.term(key).set_operator(operator)
        self.on_input_changed()

    def set_term_enabled(self, key: str, enabled: bool) -> bool:
        """Toggle a term's use flag. False if a locked term refused to be disabled."""
        if not self.term(key).set_enabled(enabled):
            return False
        self.on_input_changed()
        return True

    def set_combinator(self, combinator: Union[Combinator, str]) -> None:
        self.combinator = Combinator.from_string(combinator)
        self.on_input_changed()

    def set_date_range_from(self, when: datetime, utc_offset_hours: Optional[float] = None) -> None:
        """Set both DateTime bounds (and optionally the UtcOffset term) to one instant."""
        value = when.strftime(DATABASE_DATETIME_FORMAT)
        for term in self._terms_of_kind(ControlKind.DATE_TIME):
            term.value = value
        if utc_offset_hours is not None:
            for term in self._terms_of_kind(ControlKind.UTC_OFFSET):
                term.value = format_utc_offset(utc_offset_hours)
        self.on_input_changed()

    # ------------------------------------------------------------------
    # Relative path constraint
    # ------------------------------------------------------------------

    @property
    def constrained_path(self) -> Optional[str]:
        return self._constrained_path

    def constrain_to_relative_path(self, relative_path: str) -> None:
        """
        Restrict the session to a folder subtree.

        The RelativePath term is forced on, locked, switched to subtree
        matching and pinned to the folder.

        Raises:
            FeatureUnavailableError: If the catalog has no RelativePath field
        """
        term = self._first_term(RELATIVE_PATH_FIELD)
        if term is None:
            raise FeatureUnavailableError("The catalog has no RelativePath field to constrain")
        path = normalize_relative_path(relative_path, self._separator)
        term.set_subtree_mode(True)
        term.value = path
        term.enabled = True
        term.locked = True
        self._constrained_path = path
        logger.info(f"Selection constrained to folder '{path}' and its subfolders")

    # ------------------------------------------------------------------
    # Recognition
    # ------------------------------------------------------------------

    def set_recognition_category(self, category: str) -> None:
        """
        Select a recognition category by label ('All', 'Empty' or a category name).

        Raises:
            UnknownCategoryError: If the label is not a known category
        """
        parsed = parse_category(category)
        recognition_type = None
        if not isinstance(parsed, CategorySentinel):
            recognition_type, _ = self.categories.resolve(parsed)
        self.recognition.set_category(parsed, recognition_type)
        self.on_input_changed()

    @contextmanager
    def confidence_edit(self, origin: EditOrigin):
        """
        Hold the confidence write token while a control edits the window and
        the mirror control is refreshed. Edits echoed back by the mirror
        inside the block are ignored.
        """
        with self.recognition.writer(origin) as owns:
            yield owns

    def set_confidence_low(self, value: float,
                           origin: EditOrigin = EditOrigin.PROGRAM) -> FrozenSet[EditOrigin]:
        """Returns the controls to refresh."""
        before = (self.recognition.confidence_low, self.recognition.confidence_high)
        refresh = self.recognition.set_confidence_low(value, origin)
        if (self.recognition.confidence_low, self.recognition.confidence_high) != before:
            self.on_input_changed()
        return refresh

    def set_confidence_high(self, value: float,
                            origin: EditOrigin = EditOrigin.PROGRAM) -> FrozenSet[EditOrigin]:
        """Returns the controls to refresh."""
        before = (self.recognition.confidence_low, self.recognition.confidence_high)
        refresh = self.recognition.set_confidence_high(value, origin)
        if (self.recognition.confidence_low, self.recognition.confidence_high) != before:
            self.on_input_changed()
        return refresh

    def set_use_recognition(self, enabled: bool) -> None:
        self.recognition.use_recognition = bool(enabled)
        self.on_input_changed()

    def set_rank_by_confidence(self, enabled: bool) -> None:
        self.recognition.rank_by_confidence = bool(enabled)
        self.on_input_changed()

    def set_show_missing_recognition(self, enabled: bool) -> None:
        self.recognition.show_missing_recognition = bool(enabled)
        self.on_input_changed()

    def category_choices(self) -> List[str]:
        return self.categories.labels()

    # ------------------------------------------------------------------
    # Episodes
    # ------------------------------------------------------------------

    def set_show_all_episode(self, enabled: bool) -> None:
        """
        Raises:
            EpisodeFieldUnavailableError: If no episode field was detected;
                the toggle stays off
        """
        self.episode.set_show_all(enabled)
        self.on_input_changed()

    # ------------------------------------------------------------------
    # Quick selections and reset
    # ------------------------------------------------------------------

    def _clear_uses(self) -> None:
        for term in self.terms:
            term.set_enabled(False)
        self.recognition.clear_uses()

    def reset(self) -> None:
        """Turn off every term (except a locked folder term) and all recognition uses."""
        self._clear_uses()
        self.on_input_changed()

    def apply_quick_selection(self, selection: QuickSelection, relative_path: Optional[str] = None) -> None:
        """
        Mirror a shortcut selection into the custom selection terms.

        Raises:
            FeatureUnavailableError: If the catalog lacks the field the
                shortcut selects on
        """
        if selection is QuickSelection.CUSTOM:
            return
        if selection is QuickSelection.ALL:
            self.reset()
            return

        if selection in (QuickSelection.OK, QuickSelection.DARK):
            field_id = IMAGE_QUALITY_FIELD
            value = IMAGE_QUALITY_OK if selection is QuickSelection.OK else IMAGE_QUALITY_DARK
        elif selection is QuickSelection.MARKED_FOR_DELETION:
            field_id, value = DELETE_FLAG_FIELD, 'true'
        elif selection is QuickSelection.FOLDER:
            field_id, value = RELATIVE_PATH_FIELD, relative_path or ""
        else:
            raise ValueError(f"Unsupported quick selection: {selection!r}")

        term = self._first_term(field_id)
        if term is None:
            raise FeatureUnavailableError(f"The catalog has no {field_id} field")
        self._clear_uses()
        if not term.locked:
            term.value = value
            term.set_operator(SearchOperator.EQUAL)
        term.set_enabled(True)
        self.on_input_changed()

    # ------------------------------------------------------------------
    # Value choices
    # ------------------------------------------------------------------

    def value_choices(self, field_id: str) -> List[str]:
        """
        Values offered for a field: folders for RelativePath (limited to the
        constrained subtree), stored values for Note and File fields, the
        fixed lists for choice fields and flags.
        """
        term = self._first_term(field_id)
        if term is None:
            return []
        kind = term.control_kind
        if kind is ControlKind.RELATIVE_PATH:
            folders = [normalize_relative_path(f, self._separator)
                       for f in self._store.distinct_values(field_id) if f is not None]
            if self._constrained_path is not None:
                root = self._constrained_path
                folders = [f for f in folders
                           if not root or f == root or f.startswith(root + self._separator)]
            return sorted(set(folders))
        if kind in (ControlKind.NOTE, ControlKind.FILE):
            return list(self._store.distinct_values(field_id))
        if kind is ControlKind.FIXED_CHOICE:
            return list(term.choices)
        if kind is ControlKind.IMAGE_QUALITY:
            return list(term.choices) if term.choices else list(IMAGE_QUALITY_VALUES)
        if kind in (ControlKind.FLAG, ControlKind.DELETE_FLAG):
            return ['true', 'false']
        return []

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_state(self) -> Dict[str, str]:
        return selection_state_to_dict(self.terms, self.combinator, self.recognition, self.episode)

    def load_state(self, state: Mapping[str, str]) -> None:
        """
        Restore saved settings without one recount per restored value, then
        recompile and recount once. A constrained folder stays constrained.

        All or nothing: if the state cannot be applied or compiled against
        this catalog, the session keeps its previous settings and predicate.

        Raises:
            ConfigurationError: If a saved operator, category or combinator
                does not fit this catalog
            ValueError: If a saved recognition value is malformed
        """
        previous = self.save_state()
        self._apply_state(state)
        try:
            self.on_input_changed()
        except ConfigurationError:
            self._apply_state(previous)
            raise
        logger.info(f"Selection state restored: {self._predicate.to_display_string()}")

    def _apply_state(self, state: Mapping[str, str]) -> None:
        with self.count_scheduler.suppressed():
            self.combinator = apply_selection_state(
                state, self.terms, self.recognition, self.episode, self.categories)
            if self._constrained_path is not None:
                self.constrain_to_relative_path(self._constrained_path)
