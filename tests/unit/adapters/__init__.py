"""Unit Tests - Adapters."""
