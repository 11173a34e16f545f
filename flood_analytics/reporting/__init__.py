"""
flood_analytics.reporting — Console formatting and flat-file export.

This package only presents rows the analytics engine already computed.

Modules:
  formatters — ASCII terminal tables for Typer CLI commands.
  export     — CSV/JSON flat-file export helpers.
"""
