"""Pydantic Schemas: validation for serialized catalogs and captured-license payloads.

Invariants:
    - Schemas validate at the system boundary (files, caller payloads)
    - Domain types from core/ used for enum fields; conversion to core objects is explicit
"""
