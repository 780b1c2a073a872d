"""
Import Service - Turns externally supplied books into editor pages.

Imported files are loose: any list of objects with a ``content`` field,
where only the first one may carry a cover image. This module checks the
shape and produces the canonical cover-first page list the editor works on.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

from ..errors import InvalidImportFormatError
from ..models import Page

logger = logging.getLogger(__name__)


def _string_field(raw_page: Any, key: str, index: int) -> str:
    if not isinstance(raw_page, dict):
        raise InvalidImportFormatError(f"Page {index + 1} is not an object")
    value = raw_page.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise InvalidImportFormatError(
            f"Page {index + 1}: '{key}' must be a string, got {type(value).__name__}"
        )
    return value


def normalize_imported_pages(raw_pages: Any) -> List[Page]:
    """
    Convert an imported page list into cover-first pages.

    Element 0 becomes the cover and keeps its image; every later element
    keeps only its text. An empty list gives a single blank cover.

    Raises:
        InvalidImportFormatError: If ``raw_pages`` is not a list or an
            element has the wrong shape

    Example:
        >>> pages = normalize_imported_pages([{'content': 'A', 'coverImageUrl': 'u'},
        ...                                   {'content': 'B', 'coverImageUrl': 'x'}])
        >>> pages[1].cover_image_url is None
        True
    """
    if not isinstance(raw_pages, (list, tuple)):
        raise InvalidImportFormatError("'pages' must be a list")

    if not raw_pages:
        return [Page.blank_cover()]

    pages = [Page(
        content=_string_field(raw_pages[0], 'content', 0),
        cover_image_url=_string_field(raw_pages[0], 'coverImageUrl', 0)
    )]
    for index, raw_page in enumerate(raw_pages[1:], start=1):
        if isinstance(raw_page, dict) and raw_page.get('coverImageUrl'):
            logger.debug("Dropping cover image from imported page %d", index)
        pages.append(Page(content=_string_field(raw_page, 'content', index)))

    return pages


def check_book_payload(data: Any) -> str:
    """
    Check the top-level ``{title, pages}`` shape without touching the pages.

    Returns:
        The title

    Raises:
        InvalidImportFormatError: If the title is missing or not a string,
            or ``pages`` is missing
    """
    if not isinstance(data, dict):
        raise InvalidImportFormatError("Invalid JSON structure: expected an object")

    title = data.get('title')
    if not isinstance(title, str):
        raise InvalidImportFormatError("Invalid JSON structure: 'title' must be a string")
    if 'pages' not in data:
        raise InvalidImportFormatError("Invalid JSON structure: 'pages' is missing")
    return title


def parse_book_payload(data: Any) -> Tuple[str, List[Page]]:
    """
    Validate a parsed ``{title, pages}`` object and normalize its pages.

    Returns:
        Tuple of (title, pages)

    Raises:
        InvalidImportFormatError: If the title is missing or not a string,
            or the pages are malformed
    """
    title = check_book_payload(data)
    return title, normalize_imported_pages(data['pages'])


def read_book_file(path: Path) -> Dict[str, Any]:
    """
    Read a book JSON file from disk.

    Only the top-level shape is checked here; the pages themselves are
    validated and normalized once, by ``PageEditor.load_from_import``.

    Returns:
        The parsed ``{title, pages}`` object

    Raises:
        InvalidImportFormatError: If the file cannot be read, is not valid
            JSON, or has no string title or no pages
    """
    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidImportFormatError(f"Failed to load JSON: {e}") from e
    except (IOError, OSError) as e:
        raise InvalidImportFormatError(f"Failed to read {path}: {e}") from e

    title = check_book_payload(data)
    logger.info("Read book '%s' from %s", title, path)
    return data
