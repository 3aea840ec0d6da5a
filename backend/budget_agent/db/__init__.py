"""Database Infrastructure - SQLAlchemy Base for the conversation store.

Invariants:
    - All sessions are async (AsyncSession)
"""
