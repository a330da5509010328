"""Persistence layer: database manager, ORM models and repositories."""
