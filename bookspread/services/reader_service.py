"""
Reader Service - Page turning through a finished book.

The reader is either showing the cover on its own or a spread of two
facing pages. Spreads always start on an odd page: (1, 2), (3, 4), ...
When the book has an even number of pages the last spread shows the final
page on the left and an end-of-book placeholder on the right.
"""

import logging
from typing import Optional, Union

from ..config import COVER_INDEX, FIRST_SPREAD_INDEX, SPREAD_WIDTH
from ..models import Book, ReaderFrame, Spread, TurnDirection

logger = logging.getLogger(__name__)


class ReaderSession:
    """
    Reader state for one open book.

    The session holds a reference to the book but never changes it.
    Navigation availability is always computed from the current state so
    it stays correct across open/close cycles.
    """

    def __init__(self, book: Optional[Book] = None):
        self.book: Optional[Book] = None
        self.is_cover_view = False
        self.left_index = FIRST_SPREAD_INDEX
        if book is not None:
            self.open_book(book)

    def open_book(self, book: Book):
        """Open ``book`` on its cover."""
        self.book = book
        self.is_cover_view = True
        self.left_index = FIRST_SPREAD_INDEX
        logger.debug("Opened '%s' (%d page(s))", book.title, len(book.pages))

    def close_book(self):
        self.book = None
        self.is_cover_view = False
        self.left_index = FIRST_SPREAD_INDEX

    @property
    def is_open(self) -> bool:
        return self.book is not None

    @property
    def page_count(self) -> int:
        return len(self.book.pages) if self.book is not None else 0

    @property
    def can_go_forward(self) -> bool:
        if self.book is None:
            return False
        if self.is_cover_view:
            return self.page_count > FIRST_SPREAD_INDEX
        return self.left_index + SPREAD_WIDTH < self.page_count

    @property
    def can_go_backward(self) -> bool:
        # Every spread can go back, at worst to the cover
        return self.book is not None and not self.is_cover_view

    @property
    def current_spread(self) -> Optional[Spread]:
        """The visible spread, or ``None`` in cover view."""
        if self.book is None or self.is_cover_view:
            return None
        right = self.left_index + 1
        return Spread(self.left_index, right if right < self.page_count else None)

    def turn_page(self, direction: Union[TurnDirection, str]) -> bool:
        """
        Turn one spread forward or backward.

        Turning past either end of the book does nothing.

        Args:
            direction: ``TurnDirection`` or its value ('forward', 'backward')

        Returns:
            True if the view changed
        """
        direction = TurnDirection(direction)
        if self.book is None:
            return False

        if direction is TurnDirection.FORWARD:
            if not self.can_go_forward:
                return False
            if self.is_cover_view:
                self.is_cover_view = False
                self.left_index = FIRST_SPREAD_INDEX
            else:
                self.left_index += SPREAD_WIDTH
        else:
            if self.is_cover_view:
                return False
            if self.left_index <= FIRST_SPREAD_INDEX:
                self.is_cover_view = True
                self.left_index = FIRST_SPREAD_INDEX
            else:
                self.left_index -= SPREAD_WIDTH

        logger.debug("Reader now at %s", "cover" if self.is_cover_view else self.current_spread)
        return True

    def forward(self) -> bool:
        return self.turn_page(TurnDirection.FORWARD)

    def backward(self) -> bool:
        return self.turn_page(TurnDirection.BACKWARD)

    def current_frame(self) -> ReaderFrame:
        """
        Describe what should be on screen.

        Raises:
            RuntimeError: If no book is open
        """
        if self.book is None:
            raise RuntimeError("No book is open")

        pages = self.book.pages
        if self.is_cover_view:
            return ReaderFrame(
                is_cover_view=True,
                cover=pages[COVER_INDEX],
                can_go_forward=self.can_go_forward,
                can_go_backward=self.can_go_backward
            )

        spread = self.current_spread
        return ReaderFrame(
            is_cover_view=False,
            spread=spread,
            left=pages[spread.left_index],
            right=pages[spread.right_index] if spread.right_index is not None else None,
            can_go_forward=self.can_go_forward,
            can_go_backward=self.can_go_backward
        )
