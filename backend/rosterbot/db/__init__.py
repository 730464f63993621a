"""Database Package — the SQLAlchemy declarative Base shared by all ORM models.

Invariants:
    - Engine and sessions live in infrastructure/database.py, not here

Design Decisions:
    - aiosqlite for the default SQLite store, asyncpg for PostgreSQL
"""
