"""Unit Tests - Infrastructure."""
