"""Unit Tests - Predicate compilation and evaluation."""
