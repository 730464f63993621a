"""Infrastructure Layer — relational store, repositories and cross-cutting concerns.

Invariants:
    - Infrastructure implements core/ Protocols; it never decides business rules
    - All SQLAlchemy failures leave this layer as DatabaseError
"""
