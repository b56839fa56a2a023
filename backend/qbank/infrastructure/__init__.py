"""Infrastructure Layer — database sessions and cross-cutting concerns.

Invariants:
    - Infrastructure never imports domain logic from core/ (errors only)
    - All driver failures surface as DatabaseError
"""
