"""Aggregation module for collection views.

- Tallies votes and favorites per game for the selected voters
- Applies type filter and sort order for display
- Forbidden: store access, network calls
"""
