"""
Persistence adapters.

Services depend on the repository instead of touching SQLAlchemy sessions
directly; the app factory builds one instance and injects it.
"""
