"""Core Layer — compliance rule evaluation, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All evaluators are pure and deterministic over the snapshots passed in

Design Decisions:
    - Functional core separated from imperative shell (ADR: ExMA impureim sandwich)
"""
