"""Sequential ids of the form ``<prefix>-<n>``."""

import re

_ID_RE = re.compile(r"^(?P<prefix>.*?)-?(?P<number>\d+)$")


def split_id(s: str) -> tuple[str, int] | None:
    """Split "kpi-12" into ("kpi", 12). None if there is no trailing number."""
    match = _ID_RE.match(s)
    if match is None:
        return None
    return match.group("prefix"), int(match.group("number"))


def max_number(ids, prefix: str) -> int:
    """Highest trailing number among ids carrying prefix, or 0."""
    highest = 0
    for id_ in ids:
        parts = split_id(str(id_))
        if parts is None or parts[0] != prefix:
            continue
        highest = max(highest, parts[1])
    return highest


def next_id(ids, prefix: str) -> str:
    """Next free id after the highest one with prefix.

    ["kpi-1", "kpi-9", "sales"] with prefix "kpi" -> "kpi-10"
    """
    return f"{prefix}-{max_number(ids, prefix) + 1}"


def slugify(text: str) -> str:
    """Convert text to a URL-friendly slug."""
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    return slug or "untitled"


def unique_slug(text: str, existing) -> str:
    """slugify(text), with -2, -3 ... appended until it is not in existing."""
    base = slugify(text)
    existing = set(existing)
    if base not in existing:
        return base
    n = 2
    while f"{base}-{n}" in existing:
        n += 1
    return f"{base}-{n}"
