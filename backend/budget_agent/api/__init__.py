"""API Layer - FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Chat turns are delivered as SSE; everything else returns JSON
"""
