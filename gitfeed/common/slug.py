"""Feed resource slug utilities.

A feed resource is a GitHub repository identifier in ``owner/name`` format.
It becomes part of the request path, so it is validated here rather than
being interpolated into URLs unchecked.
"""

from __future__ import annotations


def parse_resource_slug(slug: str) -> tuple[str, str]:
    """Parse a resource slug into owner and name.

    Parameters
    ----------
    slug:
        Resource slug in ``owner/name`` format. Surrounding whitespace is
        ignored.

    Returns
    -------
    tuple[str, str]
        ``(owner, name)``.

    Raises
    ------
    ValueError
        If the slug is not in ``owner/name`` format.

    Examples
    --------
    >>> parse_resource_slug("ReactiveX/RxSwift")
    ('ReactiveX', 'RxSwift')

    """
    text = slug.strip()
    if text.count("/") != 1:
        msg = f"Invalid resource slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    owner, name = text.split("/")
    if not owner or not name or any(char.isspace() for char in text):
        msg = f"Invalid resource slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    return owner, name


def normalize_resource_slug(slug: str) -> str:
    """Return ``slug`` validated and stripped of surrounding whitespace."""
    owner, name = parse_resource_slug(slug)
    return f"{owner}/{name}"
