"""Services Layer — async orchestration around the pure core.

Invariants:
    - Each service performs at most one repository round-trip per operation
    - Services never swallow repository errors; only advisory failures are downgraded

Design Decisions:
    - Collaborators injected through core/repository_protocols.py Protocols
"""
