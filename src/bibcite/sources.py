"""Bibliography source resolution.

A bibliography can be configured at several levels (typically a page and
the site it belongs to), either as inline JSON text or as an uploaded
export file. Levels are listed from most to least specific in a YAML
file:

    levels:
      - name: page
        bibliography: ""          # inline JSON export (optional)
        bibfile: references.json  # relative to this YAML file (optional)
      - name: site
        bibfile: site-references.json

Resolution prefers inline text at any level over files at any level.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import yaml

from bibcite.config import BIBLIOGRAPHY_FILE_SUFFIX

logger = logging.getLogger(__name__)


class SourceConfigError(ValueError):
    """A source configuration file could not be used.

    Raised for unreadable or malformed YAML and for entries that do not
    follow the ``levels`` schema. Problems with the bibliography data
    itself (missing files, invalid JSON) are not errors: they resolve to
    an empty bibliography.
    """


@dataclass
class SourceLevel:
    """One place a bibliography may be configured.

    Attributes:
        name: Label for logging, e.g. "page" or "site"
        bibliography: Inline JSON export text
        bibfile: Path to an uploaded export file
    """

    name: str
    bibliography: str = ""
    bibfile: Path | None = None


def read_bibliography_file(path: Path) -> str:
    """Read an export file, or return "" if it is not a readable JSON file."""
    if path.suffix.lower() != BIBLIOGRAPHY_FILE_SUFFIX:
        logger.debug("Ignoring bibliography file with unsupported type: %s", path)
        return ""
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Could not read bibliography file %s: %s", path, e)
        return ""


def resolve_bibliography(levels: Sequence[SourceLevel]) -> str:
    """Resolve the bibliography blob for the most specific level.

    Inline text is checked at every level first. Otherwise the first
    level whose file exists decides: its contents are used if it is a
    ``.json`` export, else nothing is (less specific files are not
    consulted).

    Args:
        levels: Levels ordered from most to least specific.

    Returns:
        The raw blob, or an empty string if nothing resolves.
    """
    for level in levels:
        if level.bibliography and level.bibliography.strip():
            logger.debug("Using inline bibliography from %s", level.name)
            return level.bibliography

    for level in levels:
        if level.bibfile is not None and level.bibfile.is_file():
            logger.debug("Using bibliography file %s from %s", level.bibfile, level.name)
            return read_bibliography_file(level.bibfile)

    return ""


def _inline_text(value: object) -> str:
    # Inline exports may be written as YAML structures instead of JSON text
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value or "")


def load_source_levels(path: str | Path) -> list[SourceLevel]:
    """Load source levels from a YAML file.

    Args:
        path: Path to the YAML file. Relative ``bibfile`` entries are
            resolved against its directory.

    Returns:
        List of SourceLevel objects in file order.

    Raises:
        SourceConfigError: If the file cannot be read or does not match
            the schema.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SourceConfigError(f"Cannot read source config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise SourceConfigError(f"Invalid YAML in {path}: {e}") from e

    entries = data.get("levels") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise SourceConfigError(f"{path} must define a 'levels' list")

    levels = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise SourceConfigError(f"{path}: level {index} must be a mapping")
        unknown = set(entry) - {"name", "bibliography", "bibfile"}
        if unknown:
            raise SourceConfigError(
                f"{path}: level {index} has unknown keys {sorted(map(str, unknown))}"
            )
        bibfile = entry.get("bibfile")
        levels.append(
            SourceLevel(
                name=str(entry.get("name") or f"level{index}"),
                bibliography=_inline_text(entry.get("bibliography")),
                bibfile=path.parent / str(bibfile) if bibfile else None,
            )
        )
    return levels
