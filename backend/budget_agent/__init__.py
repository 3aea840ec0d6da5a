"""Budget Agent Package - streamed LLM completions driving a budget-analysis tool loop.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
