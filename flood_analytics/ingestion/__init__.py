"""
flood_analytics.ingestion — CSV source parsing.

Modules:
  project_csv — header check + per-row validation into ProjectRecord objects.
"""
