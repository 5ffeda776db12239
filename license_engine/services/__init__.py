"""Services Layer: the engine facade callers use, wiring config, catalog and logging.

Invariants:
    - Services may log; core never does
"""
