"""
TrapSelect Test Suite

Test organization:
- unit/core/domain: Selection models and value objects
- unit/core/selection: Predicate compilation and evaluation
- unit/core/services: Count scheduling and selection sessions
- unit/infrastructure: Timers, runners, suppression flag and logging
- unit/config: Settings schema and manager
- unit/adapters: In-memory store and Qt adapters
"""
