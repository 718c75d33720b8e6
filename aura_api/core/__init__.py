"""
Core utilities shared across the Neuro Aura API.

This package hosts:
- configuration helpers (env vars, paths, feature flags)
- adapters for the external providers (Supabase identity, SMTP, lava.top)
- cross-cutting helpers such as the error taxonomy, rate limiting and
  shared-secret checks.

Services depend on these primitives instead of reading the environment or
talking to providers directly.
"""
