"""
High-level use cases for the SpinCity backend.

Each service module orchestrates the stores to implement business rules
(sale/inventory consistency, session bootstrap, backup/restore, reports).

Routers (FastAPI endpoints) call these services through the
ServiceContainer instead of touching the stores directly.
"""
