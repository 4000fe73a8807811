"""Slug helpers for product URLs."""

from typing import Iterable

from slugify import slugify

DEFAULT_SLUG = "product"


def generate_slug(name: str) -> str:
    """Lowercase, hyphen-separated ASCII slug for `name`."""
    return slugify(name or "") or DEFAULT_SLUG


def generate_unique_slug(base_slug: str, existing_slugs: Iterable[str]) -> str:
    """Return `base_slug`, or the first `base_slug-N` not already taken."""
    taken = set(existing_slugs)
    if base_slug not in taken:
        return base_slug
    counter = 1
    while f"{base_slug}-{counter}" in taken:
        counter += 1
    return f"{base_slug}-{counter}"
