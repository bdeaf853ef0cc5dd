"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Every database failure is mapped to RepositoryUnavailableError or
      ValidationRejectedError before it leaves this layer
    - AI calls wrapped with retry/timeout/error mapping

Design Decisions:
    - Resilient wrappers over raw clients (ADR: single responsibility)
"""
