"""URL slugs."""

import re

from .errors import EmptyInput, EmptyResult

# Anything outside lowercase ASCII letters and digits is a separator
_SEPARATORS = re.compile(r"[^a-z0-9]+")


def slugify(s):
    """
    Create a URL-friendly slug from ``s``.

    Non-ASCII characters are treated as separators, so text written
    entirely in another script yields no slug at all.
    """
    if s == "":
        raise EmptyInput("input string cannot be empty")
    slug = _SEPARATORS.sub("-", s.lower()).strip("-")
    if not slug:
        raise EmptyResult("slug is empty after character removal")
    return slug
