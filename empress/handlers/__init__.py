"""
Command handlers, one function per CLI command.

- statements: create, query, bulk ingestion, validation, lookups
- reports: distinct listings and aggregations
- maintenance: health, backup, restore, reset
- transfer: export to CSV/JSON
- profiles: verb/activity registries, profile check, templates
"""
