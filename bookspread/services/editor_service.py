"""
Editor Service - Page editor state machine.

The editor keeps a draft of a book's pages while the author works on it:
it grows or shrinks the page list, moves the edit cursor, deletes pages
and finally materializes a ``Book``. Page 0 is the cover and is never
deleted or shifted.

The text box the author types into belongs to the presentation layer.
Every transition therefore takes a ``PageDraft`` with the current text
and writes it into the page under the cursor before anything moves.
"""

import copy
import logging
import random
import time
import uuid
from typing import Any, List, Optional

from ..config import (
    COVER_INDEX,
    MIN_PAGES_AFTER_DELETE,
    MIN_TARGET_PAGES,
    random_cover_color,
)
from ..errors import (
    EmptyCoverError,
    EmptyTitleError,
    InvalidImportFormatError,
    MinimumPagesError,
    ProtectedPageError,
)
from ..models import Book, EditorStep, Page, PageDraft
from .import_service import normalize_imported_pages

logger = logging.getLogger(__name__)


def new_book_id() -> str:
    """Return a fresh, unique book id."""
    return f"book-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class PageEditor:
    """
    Draft of a book being created or edited.

    Create one per authoring session with ``for_new_book`` or
    ``for_book``; drop it on cancel. The stored book is never touched:
    ``save`` returns a new ``Book`` and the caller decides where it goes.
    """

    def __init__(
        self,
        title: str = "",
        pages: Optional[List[Page]] = None,
        editing_book_id: Optional[str] = None,
        cover_color: str = "",
        rng: Optional[random.Random] = None
    ):
        self.title = title
        self.pages: List[Page] = pages if pages else [Page.blank_cover()]
        self.current_page_index = COVER_INDEX
        self.editing_book_id = editing_book_id
        self.step = EditorStep.SETUP
        self._cover_color = cover_color
        self._rng = rng

    @classmethod
    def for_new_book(cls, rng: Optional[random.Random] = None) -> 'PageEditor':
        """Start a new book: a single blank cover."""
        return cls(rng=rng)

    @classmethod
    def for_book(cls, book: Book, rng: Optional[random.Random] = None) -> 'PageEditor':
        """Start editing a copy of an existing book."""
        return cls(
            title=book.title,
            pages=book.copy_pages(),
            editing_book_id=book.id,
            cover_color=book.cover_color,
            rng=rng
        )

    # --- Derived state -------------------------------------------------

    @property
    def is_new(self) -> bool:
        return self.editing_book_id is None

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def current_page(self) -> Page:
        return self.pages[self.current_page_index]

    @property
    def is_editing_cover(self) -> bool:
        return self.current_page_index == COVER_INDEX

    @property
    def can_go_previous(self) -> bool:
        return self.current_page_index > 0

    @property
    def can_go_next(self) -> bool:
        return self.current_page_index < len(self.pages) - 1

    @property
    def can_delete_current(self) -> bool:
        return (self.current_page_index != COVER_INDEX
                and len(self.pages) > MIN_PAGES_AFTER_DELETE)

    @property
    def page_label(self) -> str:
        if self.is_editing_cover:
            return "Page 1 (Cover)"
        return f"Page {self.current_page_index + 1}"

    @property
    def page_indicator(self) -> str:
        return f"Page {self.current_page_index + 1} of {len(self.pages)}"

    # --- Transitions ---------------------------------------------------

    def commit_draft(self, draft: PageDraft):
        """
        Write the author's current text into the page under the cursor.

        On the cover, a draft cover image URL is stored too. This always
        applies, even when the transition that called it fails afterwards.
        """
        page = self.pages[self.current_page_index]
        page.content = draft.content
        if self.is_editing_cover and draft.cover_image_url is not None:
            page.cover_image_url = draft.cover_image_url.strip()

    def set_target_page_count(self, count: int):
        """
        Grow or shrink the draft to ``count`` pages.

        New pages are blank content pages appended at the end; shrinking
        cuts from the end and never reaches the cover.

        Raises:
            MinimumPagesError: If ``count`` is below 1
        """
        if count < MIN_TARGET_PAGES:
            raise MinimumPagesError(f"Invalid page count: {count}")

        current = len(self.pages)
        if count > current:
            self.pages.extend(Page() for _ in range(count - current))
        elif count < current:
            del self.pages[max(count, MIN_TARGET_PAGES):]

        self.current_page_index = min(self.current_page_index, len(self.pages) - 1)
        logger.debug("Page count %d -> %d", current, len(self.pages))

    def begin_page_editing(self, title: str, page_count: int):
        """
        Leave the setup step: set the title and page count, open the cover.

        Raises:
            EmptyTitleError: If the title is blank
            MinimumPagesError: If ``page_count`` is below 1
        """
        title = (title or "").strip()
        if not title:
            raise EmptyTitleError()
        if page_count < MIN_TARGET_PAGES:
            raise MinimumPagesError(f"Invalid page count: {page_count}")

        self.title = title
        self.set_target_page_count(page_count)
        self.current_page_index = COVER_INDEX
        self.step = EditorStep.PAGES

    def back_to_setup(self, draft: PageDraft):
        """Return to the setup step, keeping the text typed so far."""
        self.commit_draft(draft)
        self.step = EditorStep.SETUP

    def navigate(self, delta: int, draft: PageDraft) -> int:
        """
        Move the cursor by ``delta`` pages, clamped to the draft.

        Returns:
            The new cursor position
        """
        self.commit_draft(draft)
        last = len(self.pages) - 1
        target = min(max(self.current_page_index + delta, 0), last)
        if target != self.current_page_index:
            logger.debug("Editor cursor %d -> %d", self.current_page_index, target)
        self.current_page_index = target
        return target

    def delete_page(self, index: int, draft: PageDraft):
        """
        Remove the page at ``index`` and land the cursor next to it.

        Raises:
            ProtectedPageError: If ``index`` is the cover
            MinimumPagesError: If the draft has only the cover and one page
            IndexError: If ``index`` is past the end of the draft
        """
        self.commit_draft(draft)

        if index == COVER_INDEX:
            raise ProtectedPageError()
        if len(self.pages) <= MIN_PAGES_AFTER_DELETE:
            raise MinimumPagesError(
                "Cannot delete the last content page, a book needs the cover and one page"
            )
        if not COVER_INDEX < index < len(self.pages):
            raise IndexError(f"Page index {index} out of range (1-{len(self.pages) - 1})")

        del self.pages[index]
        self.current_page_index = max(0, min(index, len(self.pages) - 1))
        logger.debug("Deleted page %d, %d page(s) left", index, len(self.pages))

    def delete_current_page(self, draft: PageDraft):
        """Delete the page under the cursor."""
        self.delete_page(self.current_page_index, draft)

    def load_from_import(self, title: Any, imported_pages: Any):
        """
        Replace the draft with an imported book and open its cover.

        Raises:
            InvalidImportFormatError: If the title is not a string or the
                pages are malformed
        """
        if not isinstance(title, str):
            raise InvalidImportFormatError("Invalid JSON structure: 'title' must be a string")
        pages = normalize_imported_pages(imported_pages)

        self.title = title
        self.pages = pages
        self.current_page_index = COVER_INDEX
        logger.info("Loaded imported book '%s' (%d page(s))", title, len(pages))

    def save(self, draft: PageDraft) -> Book:
        """
        Commit the draft and build the finished ``Book``.

        The editor keeps its state, so a failed save can be fixed and
        retried. Nothing is written anywhere; insert or replace the
        returned book in the library by id.

        Raises:
            EmptyTitleError: If the title is blank
            EmptyCoverError: If the cover has neither text nor an image
        """
        self.commit_draft(draft)

        title = self.title.strip()
        if not title:
            raise EmptyTitleError()
        cover = self.pages[COVER_INDEX]
        if cover.is_blank():
            raise EmptyCoverError()

        cover_color = self._cover_color
        if not cover_color and not cover.cover_image_url:
            cover_color = random_cover_color(self._rng)

        book = Book(
            id=self.editing_book_id or new_book_id(),
            title=title,
            pages=copy.deepcopy(self.pages),
            cover_color=cover_color
        )
        logger.info("Saved book '%s' (%s, %d page(s))",
                    book.title, book.id, len(book.pages))
        return book
