"""Request bodies accepted by the HTTP endpoints."""
