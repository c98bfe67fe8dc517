"""Helpers for turning raw item fields into display text and markup."""

from __future__ import annotations

import html
from urllib.parse import urlsplit

from bibcite.config import DOI_RESOLVER, UNKNOWN_AUTHOR


def escape(value: object) -> str:
    """HTML-escape a field value, including both quote characters."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def escape_text(value: object) -> str:
    """HTML-escape text content, leaving quotes for punctuation enhancers."""
    if value is None:
        return ""
    return html.escape(str(value), quote=False)


def convert_to_initials(first_name: str) -> str:
    """Convert given names to initials, e.g. ``"John Ronald"`` -> ``"J. R."``."""
    return " ".join(f"{word[0]}." for word in first_name.split())


def creator_name(creator: object) -> str | None:
    """Return a creator's surname, or single-field name, if present."""
    if not isinstance(creator, dict):
        return None
    name = creator.get("lastName") or creator.get("name")
    return str(name) if name else None


def format_creator(creator: dict) -> str | None:
    """Format one creator as ``"Last, F. M."`` (or the single-field name)."""
    last_name = creator.get("lastName")
    if last_name:
        initials = convert_to_initials(str(creator.get("firstName") or ""))
        return f"{last_name}, {initials}" if initials else str(last_name)
    name = creator.get("name")
    return str(name) if name else None


def format_authors(creators: object) -> str:
    """Join formatted creators: ``A``, ``A & B``, ``A, B & C``.

    Returns ``"Unknown"`` when there are no usable creators.
    """
    if not isinstance(creators, list):
        return UNKNOWN_AUTHOR
    names = []
    for creator in creators:
        if not isinstance(creator, dict):
            continue
        formatted = format_creator(creator)
        if formatted:
            names.append(formatted)
    if not names:
        return UNKNOWN_AUTHOR
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + " & " + names[-1]


def split_url_label(url: str) -> tuple[str, str]:
    """Split a URL into a display domain and the remaining path.

    The scheme and a leading ``www.`` are dropped:

        >>> split_url_label("https://www.example.com/a/b?c=1")
        ('example.com', '/a/b?c=1')
    """
    parts = urlsplit(url.strip())
    if not parts.netloc:
        # Schemeless input ("example.com/a") parses entirely as a path
        domain, sep, rest = parts.path.partition("/")
        path = sep + rest
        if parts.query:
            path += "?" + parts.query
    else:
        domain = parts.netloc
        path = url.strip().split("//" + parts.netloc, 1)[1]
    if domain.lower().startswith("www."):
        domain = domain[4:]
    return domain, path


def url_label_html(url: str) -> str:
    """Render the shortened, escaped label for a URL link."""
    domain, path = split_url_label(url)
    label = f'<span class="url-domain">{escape(domain)}</span>'
    if path and path != "/":
        label += f'<span class="url-path">{escape(path)}</span>'
    return label


def doi_href(doi: str) -> str:
    """Return a resolvable link target for a DOI or DOI URL."""
    doi = doi.strip()
    if doi.lower().startswith(("http://", "https://")):
        return doi
    if doi.lower().startswith("doi:"):
        doi = doi[4:].strip()
    return DOI_RESOLVER + doi


def link(href: str, label_html: str) -> str:
    """Render an external link opening in a new tab."""
    return f'<a href="{escape(href)}" target="_blank">{label_html}</a>'
