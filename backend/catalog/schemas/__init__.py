"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at the system boundary (query params, response shape)
    - Core modules never import schemas; routes convert to plain dicts first
"""
