"""Unit Tests - Core Services."""
