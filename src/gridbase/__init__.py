"""GridBase - flexible-schema structured tables.

Typed columns, validated rows, views with a persisted column order,
filtering, sorting and CSV export.
"""

__version__ = "0.1.0"
