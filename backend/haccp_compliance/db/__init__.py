"""Database Layer — SQLAlchemy declarative base shared by all ORM models.

Invariants:
    - All sessions are async (AsyncSession), created by infrastructure/database.py

Design Decisions:
    - asyncpg driver for PostgreSQL (ADR: native async, no thread pool overhead)
"""
