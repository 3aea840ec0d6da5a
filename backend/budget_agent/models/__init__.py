"""ORM Models - SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)
    - Imported here so Base.metadata knows every table before create_all runs
"""

from budget_agent.models.conversation import Conversation  # noqa: F401
