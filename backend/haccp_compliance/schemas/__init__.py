"""API Schemas — Pydantic v2 request/response models, one module per resource.

Invariants:
    - Schemas never compute verdicts; response models render core dataclasses
"""
