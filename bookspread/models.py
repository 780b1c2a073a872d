"""
Data models for bookspread.

This module defines typed dataclasses for books, their pages and the
persisted library, plus the small value types the editor and reader
hand to the presentation layer.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from PIL import ImageColor

from .config import (
    COVER_INDEX,
    DEFAULT_LIBRARY_TITLE,
    DEFAULT_WELCOME_MESSAGE,
    FIRST_SPREAD_INDEX,
)


class Theme(Enum):
    """Library colour theme."""
    NORMAL = "normal"
    CALDAS = "caldas"

    def toggled(self) -> 'Theme':
        return Theme.CALDAS if self is Theme.NORMAL else Theme.NORMAL


class TurnDirection(Enum):
    """Direction of a page turn in the reader."""
    FORWARD = "forward"
    BACKWARD = "backward"


class EditorStep(Enum):
    """Which step of the authoring flow the editor is on."""
    SETUP = "setup"    # Title and page count
    PAGES = "pages"    # Per-page content


@dataclass
class Page:
    """
    A single page of a book.

    ``cover_image_url`` only means something on the cover (index 0).
    Content pages keep it as ``None``.
    """
    content: str = ""
    cover_image_url: Optional[str] = None

    def is_blank(self) -> bool:
        """True when the page has neither text nor an image."""
        return not self.content.strip() and not self.cover_image_url

    def to_dict(self, is_cover: bool = False) -> dict:
        """Convert to dictionary for storage."""
        data = {'content': self.content}
        if is_cover:
            data['coverImageUrl'] = self.cover_image_url or ''
        return data

    @classmethod
    def from_dict(cls, data: dict, is_cover: bool = False) -> 'Page':
        """Create from dictionary. Non-cover pages drop any cover image."""
        return cls(
            content=data.get('content') or '',
            cover_image_url=(data.get('coverImageUrl') or '') if is_cover else None
        )

    @classmethod
    def blank_cover(cls) -> 'Page':
        return cls(content='', cover_image_url='')


@dataclass
class PageDraft:
    """
    Text the author has typed for the page currently open in the editor.

    The editing surface lives in the presentation layer, so every editor
    transition takes the draft and writes it back before moving.
    """
    content: str
    cover_image_url: Optional[str] = None


@dataclass
class Book:
    """
    A finished book: a cover followed by content pages.

    Books are produced by the editor and read by the reader; the reader
    never mutates them.
    """
    id: str
    title: str
    pages: List[Page]
    cover_color: str = ""

    def __post_init__(self):
        """Validate book invariants."""
        if not self.title or not self.title.strip():
            raise ValueError("Book title cannot be empty")
        if not self.pages:
            raise ValueError("A book needs at least a cover page")
        for index, page in enumerate(self.pages):
            if index != COVER_INDEX and page.cover_image_url:
                raise ValueError(
                    f"Only the cover can have a cover image, page {index} has one"
                )
        if self.cover_color:
            try:
                ImageColor.getrgb(self.cover_color)
            except ValueError as e:
                raise ValueError(f"Invalid cover color: '{self.cover_color}'") from e

    @property
    def cover(self) -> Page:
        return self.pages[COVER_INDEX]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def content_pages(self) -> List[Page]:
        return self.pages[FIRST_SPREAD_INDEX:]

    def copy_pages(self) -> List[Page]:
        """Deep copy of the pages, safe to edit without touching this book."""
        return copy.deepcopy(self.pages)

    def __repr__(self):
        return f"Book(id='{self.id}', title='{self.title}', pages={len(self.pages)})"

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            'id': self.id,
            'title': self.title,
            'pages': [
                page.to_dict(is_cover=(index == COVER_INDEX))
                for index, page in enumerate(self.pages)
            ],
            'coverColor': self.cover_color
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Book':
        """Create from dictionary."""
        raw_pages = data.get('pages') or []
        pages = [
            Page.from_dict(page, is_cover=(index == COVER_INDEX))
            for index, page in enumerate(raw_pages)
        ] or [Page.blank_cover()]
        return cls(
            id=data['id'],
            title=data['title'],
            pages=pages,
            cover_color=data.get('coverColor') or ''
        )


@dataclass
class Spread:
    """
    Two facing pages in the reader.

    ``right_index`` is ``None`` when the left page is the last page of the
    book and the right slot shows the end-of-book placeholder.
    """
    left_index: int
    right_index: Optional[int] = None

    def __post_init__(self):
        """Validate spread addressing."""
        if self.left_index < FIRST_SPREAD_INDEX or self.left_index % 2 != 1:
            raise ValueError(
                f"Spreads start on an odd page after the cover, got {self.left_index}"
            )
        if self.right_index is not None and self.right_index != self.left_index + 1:
            raise ValueError(
                f"Spread pages must be adjacent, got {self.left_index} and {self.right_index}"
            )

    def contains(self, page_index: int) -> bool:
        """Check if a page index is part of this spread."""
        return page_index in (self.left_index, self.right_index)

    def __repr__(self):
        return f"Spread({self.left_index}, {self.right_index})"


@dataclass
class ReaderFrame:
    """
    What the reader shows right now.

    In cover view only ``cover`` is set. In spread view ``left`` is always
    set and ``right`` is ``None`` at the end of the book.
    """
    is_cover_view: bool
    cover: Optional[Page] = None
    spread: Optional[Spread] = None
    left: Optional[Page] = None
    right: Optional[Page] = None
    can_go_forward: bool = False
    can_go_backward: bool = False

    @property
    def is_end_of_book(self) -> bool:
        return not self.is_cover_view and self.right is None


@dataclass
class ValidationResult:
    """
    Result of validation checks.

    Contains validation status, errors, and warnings that can be
    displayed to the user.
    """
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str):
        """Add an error message and mark as invalid."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str):
        """Add a warning message."""
        self.warnings.append(message)

    def has_issues(self) -> bool:
        return len(self.errors) > 0 or len(self.warnings) > 0

    def get_summary(self) -> str:
        """Get a human-readable summary of validation results."""
        if self.is_valid and not self.warnings:
            return "Validation passed with no issues"

        parts = []
        if self.errors:
            parts.append(f"{len(self.errors)} error(s)")
        if self.warnings:
            parts.append(f"{len(self.warnings)} warning(s)")

        return ", ".join(parts)


@dataclass
class Library:
    """
    Everything that gets persisted: library settings and the books.

    Editor and reader scratch state never end up here; only finished
    ``Book`` values do.
    """
    user_name: str = ""
    library_title: str = DEFAULT_LIBRARY_TITLE
    custom_welcome_message: str = DEFAULT_WELCOME_MESSAGE
    current_theme: Theme = Theme.NORMAL
    books: List[Book] = field(default_factory=list)

    def find_book(self, book_id: str) -> Optional[Book]:
        for book in self.books:
            if book.id == book_id:
                return book
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            'userName': self.user_name,
            'libraryTitle': self.library_title,
            'customWelcomeMessage': self.custom_welcome_message,
            'currentTheme': self.current_theme.value,
            'books': [book.to_dict() for book in self.books]
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Library':
        """Create from dictionary, falling back to defaults for empty fields."""
        try:
            theme = Theme(data.get('currentTheme') or Theme.NORMAL.value)
        except ValueError:
            theme = Theme.NORMAL

        return cls(
            user_name=data.get('userName') or '',
            library_title=data.get('libraryTitle') or DEFAULT_LIBRARY_TITLE,
            custom_welcome_message=data.get('customWelcomeMessage') or DEFAULT_WELCOME_MESSAGE,
            current_theme=theme,
            books=[Book.from_dict(book) for book in data.get('books') or []]
        )
