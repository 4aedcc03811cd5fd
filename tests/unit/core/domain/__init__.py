# -*- coding: utf-8 -*-
"""
Unit Tests - Core Domain

Tests for TrapSelect selection models and value objects.
"""
