"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Coverage write routes commit first, then schedule retirement triggers

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
