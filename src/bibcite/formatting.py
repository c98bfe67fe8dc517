"""Reference list rendering.

Each record renders as one author-date entry:

    <span>Smith, J. &amp; Doe, A.</span> (2020a). <i>Title</i>. Journal, 12, 1-10.

The head (authors, year, title) is shared by every item type; what
follows is chosen from ``TAILS`` by the record's Zotero ``itemType``,
with ``_generic_tail`` for anything else.

Titles and a few prose fields go through a ``TextEnhancer`` (e.g.
SmartyPants curly quotes and dashes) after escaping. The enhancer is
optional: without one the escaped text is used as-is.

Usage:
    uv run python -m bibcite.cli bibliography -b references.json
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
from typing import Callable

from bibcite.bibliography import BibRecord, list_entries
from bibcite.config import BIBLIOGRAPHY_CLASS
from bibcite.dates import format_access_date
from bibcite.fields import (
    doi_href,
    escape,
    escape_text,
    format_authors,
    link,
    url_label_html,
)

logger = logging.getLogger(__name__)

TextEnhancer = Callable[[str], str]


def plain_text(text: str) -> str:
    """Default enhancer: leave text unchanged."""
    return text


def detect_enhancer() -> TextEnhancer:
    """Return SmartyPants if the optional ``smartypants`` package is installed."""
    if importlib.util.find_spec("smartypants") is None:
        logger.debug("smartypants not installed; using plain text")
        return plain_text
    return importlib.import_module("smartypants").smartypants


class EntryFormatter:
    """Formats records as reference list entries.

    Args:
        enhancer: Text enhancement applied to titles and prose fields.
            Defaults to ``plain_text``.
    """

    def __init__(self, enhancer: TextEnhancer | None = None):
        self.enhancer = enhancer or plain_text

    def prose(self, value: object) -> str:
        """Escape a prose field and apply the enhancer."""
        return self.enhancer(escape_text(value))

    def format_entry(self, record: BibRecord) -> str:
        """Render the inner HTML of one reference list entry."""
        item = record.data
        head = (
            f"<span>{escape(format_authors(item.get('creators')))}</span> "
            f"({escape(record.year)}). <i>{self.prose(item.get('title') or '')}</i>"
        )
        tail = TAILS.get(record.item_type, _generic_tail)
        return head + tail(item, self)

    def render_list(self, records: dict[str, BibRecord]) -> str:
        """Render all records as a ``<ul>``, in mapping order.

        Returns an empty string when there are no records.
        """
        if not records:
            return ""
        items = [
            f'<li id="{escape(key)}">{self.format_entry(record)}</li>'
            for key, record in records.items()
        ]
        return f'<ul class="{BIBLIOGRAPHY_CLASS}">' + "\n".join(items) + "</ul>"


# ── Shared fragments ──────────────────────────────────────────────────────────


def url_link(url: object) -> str:
    return link(str(url), url_label_html(str(url)))


def doi_link(doi: object) -> str:
    return link(doi_href(str(doi)), escape(doi))


def retrieved_from(item: dict) -> str:
    """``Retrieved <date>, from `` prefix for links with an access date."""
    access_date = item.get("accessDate")
    if not access_date:
        return ""
    formatted = format_access_date(access_date)
    return f"Retrieved {escape(formatted or access_date)}, from "


def _titled_source(item: dict, field: str, fmt: EntryFormatter) -> str:
    value = item.get(field)
    return f". {fmt.prose(value)}." if value else ""


def _retrieved_url(item: dict) -> str:
    url = item.get("url")
    return f" {retrieved_from(item)}{url_link(url)}" if url else ""


def _plain_url(item: dict) -> str:
    url = item.get("url")
    return f" {url_link(url)}" if url else ""


# ── Per-type tails ────────────────────────────────────────────────────────────


def _book_tail(item: dict, fmt: EntryFormatter) -> str:
    tail = ""
    if item.get("edition"):
        tail += f" ({fmt.prose(item['edition'])})"
    if item.get("publisher"):
        tail += f". {fmt.prose(item['publisher'])}."
    else:
        tail += "."
    return tail


def _journal_article_tail(item: dict, fmt: EntryFormatter) -> str:
    tail = ""
    if item.get("publicationTitle"):
        tail += f". {fmt.prose(item['publicationTitle'])}"
        if item.get("volume"):
            tail += f", {escape(item['volume'])}"
        if item.get("pages"):
            tail += f", {escape(item['pages'])}"
    tail += "."
    if item.get("DOI"):
        tail += f" {doi_link(item['DOI'])}"
    return tail


def _webpage_tail(item: dict, fmt: EntryFormatter) -> str:
    return _titled_source(item, "websiteTitle", fmt) + _retrieved_url(item)


def _presentation_tail(item: dict, fmt: EntryFormatter) -> str:
    tail = ""
    if item.get("presentationType"):
        tail += f" [{escape(item['presentationType'])}]."
    if item.get("meetingName"):
        tail += f" {fmt.prose(item['meetingName'])}."
    return tail + _plain_url(item)


def _interview_tail(item: dict, fmt: EntryFormatter) -> str:
    tail = f". {escape(item['interviewMedium'])}." if item.get("interviewMedium") else ""
    return tail + _plain_url(item)


def _blog_post_tail(item: dict, fmt: EntryFormatter) -> str:
    return _titled_source(item, "blogTitle", fmt) + _retrieved_url(item)


def _podcast_tail(item: dict, fmt: EntryFormatter) -> str:
    tail = ""
    if item.get("seriesTitle"):
        tail += f". {fmt.prose(item['seriesTitle'])}"
        if item.get("episodeNumber"):
            tail += f" (No. {escape(item['episodeNumber'])})"
        tail += "."
    return tail + _plain_url(item)


def _film_tail(item: dict, fmt: EntryFormatter) -> str:
    tail = f" [{escape(item['genre'])}]." if item.get("genre") else ""
    return tail + _plain_url(item)


def _newspaper_article_tail(item: dict, fmt: EntryFormatter) -> str:
    return _titled_source(item, "publicationTitle", fmt) + _retrieved_url(item)


def _generic_tail(item: dict, fmt: EntryFormatter) -> str:
    if item.get("DOI"):
        return f". {doi_link(item['DOI'])}"
    if item.get("url"):
        return f". {url_link(item['url'])}"
    return "."


TAILS: dict[str, Callable[[dict, EntryFormatter], str]] = {
    "book": _book_tail,
    "journalArticle": _journal_article_tail,
    "webpage": _webpage_tail,
    "presentation": _presentation_tail,
    "interview": _interview_tail,
    "blogPost": _blog_post_tail,
    "podcast": _podcast_tail,
    "film": _film_tail,
    "newspaperArticle": _newspaper_article_tail,
}


def render_bibliography_list(
    blob: str | bytes | None,
    enhancer: TextEnhancer | None = None,
) -> str:
    """Load a bibliography and render it as a ``<ul class="bibliography">``.

    Args:
        blob: Raw JSON export.
        enhancer: Optional text enhancer, see ``EntryFormatter``.

    Returns:
        The list HTML, or an empty string if there are no records.
    """
    return EntryFormatter(enhancer).render_list(list_entries(blob))
