"""Bibliography loading and year disambiguation.

Parses a Better BibTeX JSON export into a mapping of citation key to
``BibRecord``, then disambiguates records that share an author set and
year by suffixing their display years with a, b, c, ...

Schema (one element of the export's ``items`` array, abridged):

    {
      "citationKey": "smith-2020-example",   # used as @smith-2020-example
      "itemType": "journalArticle",
      "title": "An Example",
      "creators": [{"firstName": "Jane", "lastName": "Smith"}],
      "date": "2020-03-15",
      ...                                      # passed through untouched
    }

A malformed or empty export is never an error: it loads as an empty
mapping, so citation markers stay as plain text.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from dataclasses import dataclass, field

from bibcite.config import (
    DEFAULT_CITATION_KEY,
    DEFAULT_ITEM_TYPE,
    NO_DATE,
    UNKNOWN_AUTHOR,
)
from bibcite.dates import format_display_year, normalize_year
from bibcite.fields import creator_name

logger = logging.getLogger(__name__)


@dataclass
class BibRecord:
    """A single bibliographic record.

    Attributes:
        key: Citation key referenced as ``@key`` in prose
        item_type: Zotero item type selecting the entry format
        author: First creator's surname (or name), shown in citations
        authors: Sorted surnames of every creator, used for disambiguation
        year: Display year, possibly suffixed with a disambiguation letter
        data: The raw export item
    """

    key: str
    item_type: str
    author: str
    authors: list[str]
    year: str
    data: dict = field(default_factory=dict)

    @classmethod
    def from_item(cls, item: dict) -> BibRecord:
        """Build a record from one export item."""
        creators = item.get("creators")
        if not isinstance(creators, list):
            creators = []
        names = [name for name in map(creator_name, creators) if name]
        first = creator_name(creators[0]) if creators else None
        return cls(
            key=str(item.get("citationKey") or DEFAULT_CITATION_KEY),
            item_type=str(item.get("itemType") or DEFAULT_ITEM_TYPE),
            author=first or UNKNOWN_AUTHOR,
            authors=sorted(names) or [UNKNOWN_AUTHOR],
            year=format_display_year(item.get("date")),
            data=item,
        )


def _decode(blob: str | bytes | None) -> str:
    if blob is None:
        return ""
    if isinstance(blob, bytes):
        try:
            return blob.decode("utf-8-sig")
        except UnicodeDecodeError:
            logger.debug("Bibliography blob is not valid UTF-8")
            return ""
    return blob


def load_bibliography(blob: str | bytes | None) -> dict[str, BibRecord]:
    """Load records from a JSON export.

    Args:
        blob: Raw export text or bytes. Empty input yields no records.

    Returns:
        Dict mapping citation key to record, in source order. Duplicate
        keys (including the ``"unknown"`` default) keep the last item.
    """
    text = _decode(blob)
    if not text.strip():
        return {}

    try:
        data = json.loads(text.lstrip("\ufeff"))
    except (ValueError, RecursionError) as e:
        logger.debug("Bibliography is not valid JSON: %s", e)
        return {}

    items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(items, list):
        logger.debug("Bibliography has no 'items' array")
        return {}

    records: dict[str, BibRecord] = {}
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.debug("Skipping non-object item at index %d", index)
            continue
        record = BibRecord.from_item(item)
        if record.key in records:
            logger.debug("Duplicate citation key %r; keeping the later item", record.key)
        records[record.key] = record
    return records


def disambiguation_suffix(index: int) -> str:
    """Letter suffix for the index-th member of a group: a..z, aa, ab, ..."""
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("a") + remainder) + letters
    return letters


def _with_suffix(year: str, suffix: str) -> str:
    if year == NO_DATE:
        return f"{NO_DATE}-{suffix}"
    return year + suffix


def disambiguate(records: dict[str, BibRecord]) -> dict[str, BibRecord]:
    """Suffix display years of same-author, same-year records in place.

    Records are grouped by their sorted author names and 4-digit year.
    Within each group of two or more, keys are sorted and assigned a, b,
    c, ... in that order: ``"2020"`` becomes ``"2020a"``, ``"2020, March
    15"`` becomes ``"2020, March 15a"`` and ``"n.d."`` becomes
    ``"n.d.-a"``. Apply once per load; a second pass appends again.

    Args:
        records: Mapping from ``load_bibliography``.

    Returns:
        The same mapping, for chaining.
    """
    groups: dict[tuple[tuple[str, ...], str], list[str]] = defaultdict(list)
    for key, record in records.items():
        groups[(tuple(record.authors), normalize_year(record.year))].append(key)

    for members in groups.values():
        if len(members) < 2:
            continue
        for index, key in enumerate(sorted(members)):
            record = records[key]
            record.year = _with_suffix(record.year, disambiguation_suffix(index))
    return records


def list_entries(blob: str | bytes | None) -> dict[str, BibRecord]:
    """Load and disambiguate a bibliography in one call."""
    return disambiguate(load_bibliography(blob))
