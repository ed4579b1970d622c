"""
Core utilities shared across the SpinCity backend.

This package hosts:
- configuration helpers (env vars, paths, feature flags)
- cross-cutting services such as logging setup, the user message sink,
  identity-change notifications and password/key checks.

Stores and services depend on these primitives instead of reading the
environment or printing directly.
"""
