"""Infrastructure Layer - provider client, persistence and logging.

Invariants:
    - Every provider failure is mapped to TransportError or ProtocolError (core/errors.py)
    - No retries: a failed completion call surfaces to the agent runner as-is
"""
