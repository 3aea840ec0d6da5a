"""Core Layer - wire decoding, data model and event contracts. No IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Everything here is synchronous except decode_frames (drives an async byte source)
"""
