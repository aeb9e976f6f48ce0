"""Cross-feed duplicate detection keys.

The same paper often arrives from several feeds with different URLs
(publisher page, doi.org link, tracking parameters). Items are keyed on
their DOI when one is known, otherwise on a canonical URL, combined with
the normalized title.
"""

import hashlib
import re
import unicodedata


DOI_PATTERN = re.compile(r"10\.\d{4,}/[^\s?#&]+", re.IGNORECASE)
ITEM_ID_PREFIX = "itm_"
ITEM_ID_HASH_LENGTH = 20


def extract_doi(*candidates: str | None) -> str | None:
    """First DOI found in the candidates, lowercased."""
    for candidate in candidates:
        if not candidate:
            continue
        match = DOI_PATTERN.search(candidate)
        if match:
            return match.group(0).rstrip("/.").lower()
    return None


def normalize_url(url: str) -> str:
    """Canonical form of a URL for duplicate detection.

    Lowercases, drops query string, fragment, scheme, a leading ``www.``
    and trailing slashes.

    >>> normalize_url("https://www.Example.com/a/b/?utm_source=x#top")
    'example.com/a/b'
    """
    normalized = url.strip().lower()
    normalized = normalized.split("#", 1)[0].split("?", 1)[0]
    normalized = re.sub(r"^[a-z][a-z0-9+.-]*://", "", normalized)
    normalized = normalized.removeprefix("www.")
    return normalized.rstrip("/")


def normalize_title(title: str) -> str:
    """Accent-free, lowercase, punctuation-free title."""
    decomposed = unicodedata.normalize("NFKD", title)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()
    stripped = re.sub(r"[^\w\s]", " ", stripped)
    return re.sub(r"\s+", " ", stripped).strip()


def compute_dedupe_hash(url: str, title: str, doi: str | None = None) -> str:
    """Duplicate key for an item.

    Args:
        url: Item URL.
        title: Item title.
        doi: Declared DOI, if any; otherwise one is looked for in the URL.

    Returns:
        Hex SHA-256 digest.
    """
    found_doi = extract_doi(doi, url)
    identity = f"doi:{found_doi}" if found_doi else f"url:{normalize_url(url)}"
    content = f"{identity}|{normalize_title(title)}"
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def item_id_from_hash(dedupe_hash: str) -> str:
    """Stable item id derived from the duplicate key."""
    return f"{ITEM_ID_PREFIX}{dedupe_hash[:ITEM_ID_HASH_LENGTH]}"
