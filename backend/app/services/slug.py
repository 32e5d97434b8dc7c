"""Subdomain-safe business slugs."""

import re
import unicodedata

from .errors import BadRequestError

_SLUG_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{1,61}[a-z0-9])$")

# subdomains owned by the platform itself
RESERVED_SLUGS = frozenset({"www", "api", "app", "admin", "mail", "static", "dashboard"})


def slugify(text: str) -> str:
    """Generate a subdomain-safe slug from free text."""
    s = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode()
    s = re.sub(r"[^a-z0-9]+", "-", s.lower()).strip("-")
    return s[:63].rstrip("-") or "business"


def validate_slug(slug: str) -> str:
    """Return the normalized slug or raise BadRequestError."""
    slug = slug.strip().lower()
    if not _SLUG_RE.match(slug):
        raise BadRequestError(
            "Slug must be 3-63 characters of a-z, 0-9 and '-', not starting or ending with '-'"
        )
    if slug in RESERVED_SLUGS:
        raise BadRequestError(f"Slug '{slug}' is reserved")
    return slug
