"""Unit Tests - Core."""
