"""Identity utilities for collections and catalog games.

- collection codes: short shareable identifiers for collections
- slug: URL-safe fragment derived from a game's name
- item type classification: base game vs expansion
- catalog link: canonical URL of a game on the catalog site
- collation_key: locale-aware sort key for display names
"""

import re
import secrets
import string
import unicodedata

CODE_LENGTH = 5
CODE_ALPHABET = string.digits + string.ascii_uppercase

DEFAULT_CATALOG_HOST = "boardgamegeek.com"
DEFAULT_IMAGE_URL = "/static/default-game.png"

_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9-]")


def generate_collection_code() -> str:
    """Generate a random collection code.

    Returns:
        5-character base-36 string, uppercase (e.g. "K3Z9A").
    """
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_code(code: str) -> str:
    """Normalize user-typed collection code (strip, uppercase)."""
    return code.strip().upper()


def slugify(name: str) -> str:
    """Build a catalog URL slug from a game name.

    Lower-cases, collapses whitespace runs into a single hyphen, then
    drops every character outside [a-z0-9-].

    Examples:
        >>> slugify("Ticket to Ride: Europe")
        'ticket-to-ride-europe'
        >>> slugify("Café  Noir")
        'caf-noir'
    """
    slug = _WHITESPACE_RE.sub("-", name.lower())
    return _SLUG_STRIP_RE.sub("", slug)


def classify_item_type(raw_type: str | None) -> str:
    """Classify a raw catalog item type.

    Args:
        raw_type: Type string from the export (e.g. "standalone expansion").

    Returns:
        "boardgameexpansion" if the raw type mentions "expansion",
        otherwise "boardgame".
    """
    if raw_type and "expansion" in raw_type:
        return "boardgameexpansion"
    return "boardgame"


def build_catalog_link(
    objectid: str,
    slug: str,
    item_type: str,
    host: str = DEFAULT_CATALOG_HOST,
) -> str:
    """Build the canonical catalog URL for a game.

    https://<host>/<boardgame|boardgameexpansion>/<objectid>/<slug>
    """
    return f"https://{host}/{item_type}/{objectid}/{slug}"


def collation_key(name: str | None) -> str:
    """Return a sort key comparing names the way a reader expects.

    Accents and case are ignored so "Ábaco" sorts next to "abaco".
    """
    decomposed = unicodedata.normalize("NFKD", name or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()
