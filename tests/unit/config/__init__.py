"""Unit Tests - Configuration."""
