"""Roster Bot Package — capacity-bounded recruitment rosters for chat platforms.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
