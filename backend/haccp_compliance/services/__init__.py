"""Services Layer — async orchestration around the pure compliance core.

Invariants:
    - Each service reads its catalog snapshot once, calls core, then persists
    - Deviation hand-off failures never discard a verdict

Design Decisions:
    - One service per monitoring area for locality (ADR: ExMA no god objects)
    - Collaborators injected as Protocol types: tests pass fakes, routes pass SQL adapters
"""
