"""Infrastructure layer for GridBase."""
