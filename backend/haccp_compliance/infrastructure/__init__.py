"""Infrastructure Layer — database access, protocol implementations, and logging.

Invariants:
    - Infrastructure implements core/repository_protocols.py; core never imports it back
    - SQLAlchemy rows are converted to core dataclasses at this boundary

Design Decisions:
    - One adapter module per collaborator (catalogs/records, corrective actions)
"""
