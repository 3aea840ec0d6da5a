"""Services Layer - agent loop, tool dispatch, tool definitions and system prompt.

Invariants:
    - Tool dispatch uses an explicit dict mapping (no auto-discovery)
"""
