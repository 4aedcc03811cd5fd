"""
TrapSelect Core Layer.

- domain: pure Python models and value objects
- selection: predicate compilation and evaluation
- ports: abstract interfaces to stores, timers and runners
- services: count scheduling and the selection session
"""
