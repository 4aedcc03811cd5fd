"""
TrapSelect - selection predicate engine for camera-trap image catalogs.

Builds file selections from per-field terms, recognition criteria and
episode expansion, and keeps a debounced count of matching files.
"""

__version__ = "1.0.0"
