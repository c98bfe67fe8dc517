"""Global constants for citation rendering and output paths."""

from pathlib import Path

# Citation keys as exported by Better BibTeX
CITATION_KEY_CHARS = r"[A-Za-z0-9\-_]+"

# Record defaults
DEFAULT_CITATION_KEY = "unknown"
DEFAULT_ITEM_TYPE = "misc"
UNKNOWN_AUTHOR = "Unknown"
NO_DATE = "n.d."

# English month names; formatting does not depend on the process locale
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# Markup
CITATION_CLASS = "citation"
BIBLIOGRAPHY_CLASS = "bibliography"
DOI_RESOLVER = "https://doi.org/"

# Only JSON exports are read from uploaded bibliography files
BIBLIOGRAPHY_FILE_SUFFIX = ".json"


def prepare_output_path(output_path: Path, input_path: Path | None = None) -> Path:
    """Create the parent directory of an output file.

    Args:
        output_path: File the rendered HTML will be written to
        input_path: Source text file, if any; it must not be overwritten

    Returns:
        The output file path

    Raises:
        ValueError: If output_path is a directory or points at input_path
    """
    resolved = output_path.resolve()
    if resolved.is_dir():
        raise ValueError(f"output_path must be a file, got directory {resolved}")
    if input_path is not None and resolved == input_path.resolve():
        raise ValueError(f"Refusing to overwrite input file {resolved}")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path
