"""
TrapSelect Infrastructure Layer.

Cross-cutting services: logging, state flags, timers and count runners.
"""
