"""Catalog collection export parsing.

Adapter for reading the CSV a catalog site exports for a user's
collection. Header-driven: only the columns the engine needs are read,
everything else in the export is ignored.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path

from boardvote.models.domain import RawRow

REQUIRED_COLUMNS = ("objectid", "objectname")


class CatalogExportError(ValueError):
    """Raised when an export cannot be read as a collection."""

    pass


def parse_collection_csv(text: str) -> list[RawRow]:
    """Parse a collection export.

    Blank lines are skipped and a leading UTF-8 BOM is tolerated.
    Values are stripped; empty optional values become None.

    Args:
        text: Full CSV content, header line first.

    Returns:
        One RawRow per data line, in file order. Rows are not validated
        here; the reconciler decides which rows are usable.

    Raises:
        CatalogExportError: If the header lacks objectid or objectname.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))

    header = [name.strip() for name in (reader.fieldnames or [])]
    missing = [column for column in REQUIRED_COLUMNS if column not in header]
    if missing:
        raise CatalogExportError(f"Export is missing required columns: {', '.join(missing)}")
    reader.fieldnames = header

    rows: list[RawRow] = []
    for record in reader:
        if _is_blank(record):
            continue
        rows.append(
            RawRow(
                objectid=_clean(record.get("objectid")),
                objectname=_clean(record.get("objectname")),
                originalname=_clean(record.get("originalname")),
                itemtype=_clean(record.get("itemtype")) or "",
                comment=_clean(record.get("comment")),
            )
        )
    return rows


def read_collection_csv(path: Path) -> list[RawRow]:
    """Read and parse an export file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        CatalogExportError: If the header lacks required columns.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Export file not found: {path}")
    return parse_collection_csv(path.read_text(encoding="utf-8-sig"))


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _is_blank(record: dict[str, str | None]) -> bool:
    for key, value in record.items():
        # DictReader collects extra fields under a None key as a list
        if key is None:
            continue
        if value and value.strip():
            return False
    return True
