"""Services Layer — async persistence operations over the question bank.

Invariants:
    - Each service wraps one AsyncSession and owns its commit
    - Domain validation is delegated to core/ before any write

Design Decisions:
    - Store and upvote engine are separate: the toggle has its own locking discipline
"""
