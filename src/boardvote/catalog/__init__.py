"""Catalog adapters.

- export: parse a catalog collection export (CSV) into rows
- images: resolve game image URLs from the catalog XML API
- Forbidden: DB writes, vote logic
"""
