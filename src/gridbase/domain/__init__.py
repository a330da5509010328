"""Domain layer for GridBase: entities, exceptions and services."""
