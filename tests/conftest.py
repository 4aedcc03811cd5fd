"""
Pytest configuration and fixtures for TrapSelect tests.

This module provides a small camera-trap catalog (field definitions, rows
with recognition data and episode values) plus the scheduler, store and
session fixtures shared across the test suite.
"""
import pytest
import sys
from datetime import datetime
from pathlib import Path

# Add project directory to Python path
project_dir = Path(__file__).parent.parent
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))

from trapselect.adapters.memory_store import InMemoryFileStore
from trapselect.config.config_manager import ConfigManager
from trapselect.core.domain.field_term import FieldDefinition
from trapselect.core.services.selection_service import SelectionSession
from trapselect.infrastructure.scheduling.virtual_clock import VirtualClockScheduler


DETECTION_CATEGORIES = {'1': 'animal', '2': 'person', '3': 'vehicle'}
CLASSIFICATION_CATEGORIES = {'10': 'deer', '11': 'elk'}


@pytest.fixture
def field_definitions():
    """Catalog fields in template order (Date, Time and Folder are never selectable)."""
    return [
        FieldDefinition('File', 'File', 'File'),
        FieldDefinition('RelativePath', 'Folder path', 'RelativePath'),
        FieldDefinition('Folder', 'Folder', 'Note'),
        FieldDefinition('Date', 'Date', 'Note'),
        FieldDefinition('Time', 'Time', 'Note'),
        FieldDefinition('DateTime', 'Date/time', 'DateTime'),
        FieldDefinition('UtcOffset', 'UTC offset', 'UtcOffset'),
        FieldDefinition('ImageQuality', 'Image quality', 'ImageQuality', 'Ok', ('Ok', 'Dark')),
        FieldDefinition('DeleteFlag', 'Delete?', 'DeleteFlag', 'false'),
        FieldDefinition('Species', 'Species', 'FixedChoice', '', ('deer', 'elk', 'bear')),
        FieldDefinition('Count', 'Count', 'Counter', '0'),
        FieldDefinition('Notes', 'Notes', 'Note'),
        FieldDefinition('Episode', 'Episode', 'Note'),
        FieldDefinition('Reviewed', 'Reviewed', 'Flag', 'false'),
    ]


@pytest.fixture
def catalog_rows():
    """Six files over three folders, with detections, classifications and episodes."""
    return [
        {'File': 'IMG_0001.JPG', 'RelativePath': 'SiteA', 'DateTime': '2023-01-05 10:00:00',
         'ImageQuality': 'Ok', 'DeleteFlag': 'false', 'Species': 'deer', 'Count': '2',
         'Notes': 'buck', 'Episode': '1:1|2', 'Reviewed': 'True',
         'detections': [('1', 0.95)]},
        {'File': 'IMG_0002.JPG', 'RelativePath': 'SiteA', 'DateTime': '2023-01-05 10:00:05',
         'ImageQuality': 'Dark', 'DeleteFlag': 'false', 'Species': 'deer', 'Count': '1',
         'Notes': '', 'Episode': '1:2|2', 'Reviewed': 'false',
         'detections': [('1', 0.6)]},
        {'File': 'IMG_0003.JPG', 'RelativePath': 'SiteA\\Cam1', 'DateTime': '2023-01-20 22:10:00',
         'ImageQuality': 'Dark', 'DeleteFlag': 'true', 'Species': '', 'Count': '0',
         'Notes': None, 'Episode': '2:1|1', 'Reviewed': 'FALSE',
         'detections': [('1', 0.005)]},
        {'File': 'IMG_0004.JPG', 'RelativePath': 'SiteA/Cam2', 'DateTime': '2023-02-02 08:00:00',
         'ImageQuality': 'Ok', 'DeleteFlag': 'false', 'Species': 'elk', 'Count': '3',
         'Notes': 'herd', 'Episode': '3:1|1', 'Reviewed': 'false',
         'detections': [('1', 0.85), ('2', 0.3)], 'classifications': [('11', 0.9)]},
        {'File': 'IMG_0005.JPG', 'RelativePath': 'SiteAB', 'DateTime': '2023-01-10 12:00:00',
         'ImageQuality': 'Dark', 'DeleteFlag': 'false', 'Species': 'bear', 'Count': '1',
         'Notes': '', 'Episode': '4:1|1', 'Reviewed': 'true'},
        {'File': 'IMG_0006.JPG', 'RelativePath': 'SiteB', 'DateTime': '2022-12-31 23:59:59',
         'ImageQuality': 'Ok', 'DeleteFlag': 'false', 'Species': '', 'Count': '0',
         'Notes': '', 'Episode': '5:1|1', 'Reviewed': 'false',
         'detections': [('2', 0.99)]},
    ]


@pytest.fixture
def store(catalog_rows):
    return InMemoryFileStore(catalog_rows, DETECTION_CATEGORIES, CLASSIFICATION_CATEGORIES)


@pytest.fixture
def clock():
    return VirtualClockScheduler()


@pytest.fixture
def default_config():
    return ConfigManager(auto_load=False)


@pytest.fixture
def make_session(store, field_definitions, clock, catalog_rows):
    """Factory building a SelectionSession over the sample catalog."""
    def _make(**kwargs):
        kwargs.setdefault('sample_row', catalog_rows[0])
        kwargs.setdefault('default_datetime', datetime(2023, 1, 1, 0, 0, 0))
        return SelectionSession(store, field_definitions, clock, **kwargs)
    return _make


@pytest.fixture
def session(make_session):
    return make_session()
