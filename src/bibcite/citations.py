"""Replace ``@key`` citation markers in prose with linked citation labels.

Two marker forms are recognized in one left-to-right pass:

    [see @smith-2020, p. 5]   ->  (see Smith, 2020, p. 5)
    @smith-2020               ->  (Smith, 2020)

Both render as ``<span class="citation"><a href="#key">...</a></span>``
so the label links to the matching ``<li id="key">`` of the reference
list. Unknown keys stay visible as ``(key, n.d.)``.

Usage:
    uv run python -m bibcite.cli render article.md -b references.json
"""

from __future__ import annotations

import logging
import re

from bibcite.bibliography import BibRecord, list_entries
from bibcite.config import CITATION_CLASS, CITATION_KEY_CHARS, NO_DATE
from bibcite.fields import escape

logger = logging.getLogger(__name__)

PARENTHETICAL = "parenthetical"
NARRATIVE = "narrative"
BARE_STYLES = (PARENTHETICAL, NARRATIVE)

# Bracketed form must come first in the alternation so a marker inside
# brackets is never consumed as a bare citation.
CITATION_PATTERN = re.compile(
    rf"\[(?P<prefix>[^\[\]]*?)@(?P<key>{CITATION_KEY_CHARS})(?P<suffix>[^\[\]]*)\]"
    rf"|@(?P<bare>{CITATION_KEY_CHARS})"
)

# A suffix starting with one of these attaches without a space
_ATTACHED_PUNCTUATION = ",;:.)"


def resolve(key: str, records: dict[str, BibRecord]) -> tuple[str, str]:
    """Return ``(author, year)`` for a key, or a visible placeholder."""
    record = records.get(key)
    if record is None:
        logger.debug("Unresolved citation key %r", key)
        return key, NO_DATE
    return record.author, record.year


def citation_span(key: str, label: str) -> str:
    """Wrap an already-escaped label in the citation span and anchor."""
    return f'<span class="{CITATION_CLASS}"><a href="#{escape(key)}">{label}</a></span>'


def bracket_label(prefix: str, author: str, year: str, suffix: str) -> str:
    """Compose the unescaped label text of a bracketed citation."""
    label = f"{prefix} {author}, {year}" if prefix else f"{author}, {year}"
    if suffix:
        separator = "" if suffix[0] in _ATTACHED_PUNCTUATION else " "
        label += separator + suffix
    return label


def replace_citations(
    text: str | None,
    records: dict[str, BibRecord],
    *,
    bare_style: str = PARENTHETICAL,
) -> str:
    """Replace citation markers in text using an already-loaded mapping.

    Text outside of markers is copied unchanged. Only the first ``@key``
    in a bracket is resolved; any later ones stay in the suffix as text.

    Args:
        text: Prose containing zero or more citation markers.
        records: Mapping from ``list_entries``. When empty, text is
            returned as-is and markers stay plain text.
        bare_style: ``"parenthetical"`` renders ``(Author, Year)`` inside
            the link; ``"narrative"`` renders ``Author (Year)`` with only
            the parenthesized year linked.

    Returns:
        Text with markers replaced by citation markup.

    Raises:
        ValueError: If bare_style is not a known style.
    """
    if bare_style not in BARE_STYLES:
        raise ValueError(f"bare_style must be one of {BARE_STYLES}, got {bare_style!r}")
    if not text:
        return ""
    if not records:
        return text

    def replace_marker(match: re.Match) -> str:
        bare_key = match.group("bare")
        if bare_key is not None:
            author, year = resolve(bare_key, records)
            if bare_style == NARRATIVE:
                return f"{escape(author)} " + citation_span(bare_key, f"({escape(year)})")
            return citation_span(bare_key, f"({escape(f'{author}, {year}')})")

        key = match.group("key")
        author, year = resolve(key, records)
        label = bracket_label(
            match.group("prefix").strip(),
            author,
            year,
            match.group("suffix").strip(),
        )
        return citation_span(key, f"({escape(label)})")

    return CITATION_PATTERN.sub(replace_marker, text)


def render_citations(
    text: str | None,
    blob: str | bytes | None,
    *,
    bare_style: str = PARENTHETICAL,
) -> str:
    """Load a bibliography and replace the citation markers in text.

    The mapping is built fresh for every call.

    Args:
        text: Prose containing citation markers.
        blob: Raw JSON export; empty or malformed leaves text unchanged.
        bare_style: See ``replace_citations``.

    Returns:
        Text with markers replaced by citation markup.
    """
    if not text:
        return ""
    return replace_citations(text, list_entries(blob), bare_style=bare_style)
