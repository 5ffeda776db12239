"""Core Layer: pure domain logic, no IO, no logging, no configuration.

Invariants:
    - No module in core/ imports from services/, schemas/ or infrastructure/
    - All functions are pure and deterministic; the evaluation date is always an input

Design Decisions:
    - Functional core separated from imperative shell
    - Rule checks return a verdict or None and compose with `or` (first failure wins)
"""
