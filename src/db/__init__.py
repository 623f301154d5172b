"""Persistence: ORM models, session handling and repositories."""
