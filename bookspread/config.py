"""
Centralized configuration and constants for bookspread.

This module contains the page-addressing constants shared by the editor and
the reader, the library defaults, and the cover colour rules used when a
book has no cover image.
"""

import os
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from PIL import ImageColor

if TYPE_CHECKING:
    from .models import Book, Theme


# Page addressing
COVER_INDEX = 0                 # The cover is always the first page
FIRST_SPREAD_INDEX = 1          # Spreads start right after the cover
SPREAD_WIDTH = 2                # Pages shown side by side in the reader
MIN_TARGET_PAGES = 1            # A draft always keeps its cover
MIN_PAGES_AFTER_DELETE = 2      # Cover + at least one content page

# Library defaults
DEFAULT_LIBRARY_TITLE = "My Library"
DEFAULT_WELCOME_MESSAGE = "Welcome to"
EXPORT_FILENAME = "library-backup.json"

# Storage location
LIBRARY_PATH_ENV = "BOOKSPREAD_LIBRARY"
DEFAULT_LIBRARY_PATH = Path.home() / ".bookspread" / "library.json"

# Random cover colours only use the lighter hex digits
COVER_COLOR_DIGITS = "789ABCD"

# Theme fallback colours (hex color codes)
COLOR_CALDAS_COVER = '#3A3A5E'  # Dark slate - covers in caldas mode


@dataclass
class ThemePalette:
    """
    Cover fallback colours for a theme.

    When ``fixed_cover_color`` is empty, books without a colour get a
    fresh random colour each time they are drawn.
    """
    name: str
    fixed_cover_color: str = ""

    def __post_init__(self):
        """Validate color codes."""
        if self.fixed_cover_color:
            try:
                ImageColor.getrgb(self.fixed_cover_color)
            except ValueError as e:
                raise ValueError(
                    f"fixed_cover_color must be a valid color, got '{self.fixed_cover_color}'"
                ) from e


THEME_PALETTES = {
    'normal': ThemePalette('normal'),
    'caldas': ThemePalette('caldas', COLOR_CALDAS_COVER),
}


def resolve_library_path(path: Optional[Path] = None) -> Path:
    """Pick the library file: explicit path, then environment, then default."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(LIBRARY_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_LIBRARY_PATH


def random_cover_color(rng: Optional[random.Random] = None) -> str:
    """
    Return a random light ``#RRGGBB`` colour for a book cover.

    Example:
        >>> random_cover_color(random.Random(0))[0]
        '#'
    """
    rng = rng or random
    return "#" + "".join(rng.choice(COVER_COLOR_DIGITS) for _ in range(6))


def cover_background(book: 'Book', theme: 'Theme', rng: Optional[random.Random] = None) -> str:
    """
    Pick what to paint behind a book's cover.

    The cover image wins, then the book's own colour, then the theme's
    fallback. Returns either an image URL or a colour string.
    """
    cover = book.cover
    if cover.cover_image_url:
        return cover.cover_image_url
    if book.cover_color:
        return book.cover_color
    palette = THEME_PALETTES.get(theme.value, THEME_PALETTES['normal'])
    return palette.fixed_cover_color or random_cover_color(rng)
