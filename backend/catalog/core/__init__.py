"""Core Layer — pure catalog logic, no IO, no async.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - All functions are pure and deterministic (time is passed in, never read)

Design Decisions:
    - Functional core separated from imperative shell: the orchestrator does the
      IO and calls into these modules for every decision
"""
