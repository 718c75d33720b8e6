"""
High-level use cases for the Neuro Aura API.

Each service orchestrates the repository and the provider adapters to
implement one business flow (confirm an email, reset a password, reconcile a
payment, open an invoice, read lessons, store uploads).

Routers call these services instead of touching the database or the providers
directly. Services receive their collaborators through their constructor; the
app factory builds them once per process.
"""
