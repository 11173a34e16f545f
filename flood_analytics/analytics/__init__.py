"""
Aggregation & scoring engine: turns a snapshot of ProjectRecords into the
two report tables.  Pure functions, no file or console I/O.

Modules
-------
stats      : median / mean / pct_over / clamp helpers.
regional   : build_regional_summary() + normalize_efficiency_scores().
contractor : build_contractor_ranking() + reliability_index() + risk_flag().
"""
