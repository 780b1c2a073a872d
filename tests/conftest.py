"""
Pytest configuration and fixtures.
"""

import logging
import random

import pytest

from bookspread.models import Book, Library, Page


def make_book(page_count, book_id="book-1", title="Sample", cover_image_url=""):
    """Book with a cover and ``page_count - 1`` numbered content pages."""
    pages = [Page("Cover text", cover_image_url)]
    pages += [Page(f"Page {i}") for i in range(1, page_count)]
    return Book(id=book_id, title=title, pages=pages, cover_color="#AABBCC")


@pytest.fixture
def rng():
    """Seeded random source for cover colours."""
    return random.Random(1234)


@pytest.fixture
def five_page_book():
    """Cover + 4 content pages."""
    return make_book(5)


@pytest.fixture
def cover_only_book():
    return make_book(1, book_id="book-cover-only")


@pytest.fixture
def library_path(tmp_path):
    """Library file path inside a temp directory."""
    return tmp_path / "library.json"


@pytest.fixture
def sample_library():
    return Library(
        user_name="Lu",
        library_title="Lu's Shelf",
        books=[make_book(3, book_id="book-a", title="Alpha"),
               make_book(4, book_id="book-b", title="Beta")]
    )


@pytest.fixture
def sample_book_payload():
    """Book import payload as read from a JSON file."""
    return {
        'title': 'T',
        'pages': [
            {'content': 'A', 'coverImageUrl': 'u'},
            {'content': 'B'},
        ]
    }


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logger() so caplog sees records from every test."""
    yield
    logger = logging.getLogger("bookspread")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
