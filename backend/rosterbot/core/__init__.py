"""Core Layer — pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Repository contracts live here as Protocols; implementations live in infrastructure/
"""
