"""Empirion Plans Package — business plan lifecycle and round-KPI history.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
